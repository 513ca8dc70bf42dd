def _payload(pkt):
    # The test client unwraps the arguments of "message" events.
    args = pkt['args']
    return args if isinstance(args, dict) else args[0]


def _events(sio_client, name):
    return [_payload(pkt) for pkt in sio_client.get_received() if pkt['name'] == name]


def _received(sio_client):
    return sio_client.get_received()


def _join(sio_client, name, room='lobby'):
    return sio_client.emit('join', {'playerName': name, 'room': room}, callback=True)


def test_join_acks_and_welcomes(connect):
    ann = connect()
    assert ann.is_connected()

    ack = _join(ann, 'Ann')

    assert not ack
    received = _received(ann)
    messages = [_payload(p)['text'] for p in received if p['name'] == 'message']
    assert messages == ['Welcome!']
    rooms = [_payload(p) for p in received if p['name'] == 'room']
    assert rooms == [{'room': 'lobby', 'players': [{'playerName': 'Ann'}]}]


def test_join_notice_goes_to_others_only(connect):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    ann.get_received()

    assert not _join(bob, 'Bob')

    ann_received = _received(ann)
    assert [_payload(p)['text'] for p in ann_received if p['name'] == 'message'] == ['Bob has joined the game!']
    assert [_payload(p)['players'] for p in ann_received if p['name'] == 'room'] == [
        [{'playerName': 'Ann'}, {'playerName': 'Bob'}]
    ]
    bob_messages = [_payload(p)['text'] for p in _received(bob) if p['name'] == 'message']
    assert bob_messages == ['Welcome!']


def test_duplicate_name_is_acked_with_error(connect):
    ann, other = connect(), connect()
    _join(ann, 'Ann')
    ann.get_received()

    ack = _join(other, 'ann')

    assert isinstance(ack, str)
    assert 'already in use' in ack
    assert _received(other) == []
    assert _received(ann) == []


def test_chat_reaches_room_including_sender(connect):
    ann, bob, carl = connect(), connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    _join(carl, 'Carl', room='elsewhere')
    for c in (ann, bob, carl):
        c.get_received()

    ack = ann.emit('sendMessage', 'hi there', callback=True)

    assert not ack
    assert [m['text'] for m in _events(ann, 'message')] == ['hi there']
    bob_messages = _events(bob, 'message')
    assert [(m['playerName'], m['text']) for m in bob_messages] == [('Ann', 'hi there')]
    assert _events(carl, 'message') == []


def test_events_before_join_are_rejected(connect):
    ghost = connect()
    for event, arg in [('sendMessage', 'hi'), ('getQuestion', None), ('sendAnswer', 'x'), ('getAnswer', None)]:
        ack = ghost.emit(event, arg, callback=True)
        assert isinstance(ack, str) and ack
    assert _received(ghost) == []


def test_full_trivia_round(connect, provider):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    ann.get_received()
    bob.get_received()

    assert not ann.emit('getQuestion', None, callback=True)
    question, = _events(bob, 'question')
    assert question['playerName'] == 'Ann'
    assert question['question'] == 'What is the capital of France?'
    assert sorted(question['answers']) == ['Berlin', 'London', 'Paris', 'Rome']
    ann.get_received()

    assert not bob.emit('sendAnswer', 'London', callback=True)
    answer, = _events(ann, 'answer')
    assert answer['playerName'] == 'Bob'
    assert answer['text'] == 'London'
    assert answer['isRoundOver'] is True
    bob.get_received()

    assert not ann.emit('getAnswer', None, callback=True)
    reveal, = _events(bob, 'correctAnswer')
    assert reveal['text'] == 'Paris'
    assert provider.calls == 1


def test_reveal_before_question_is_acked_with_error(connect):
    ann = connect()
    _join(ann, 'Ann', room='fresh')
    ann.get_received()

    ack = ann.emit('getAnswer', None, callback=True)

    assert isinstance(ack, str) and ack
    assert _received(ann) == []


def test_provider_failure_is_acked_not_broadcast(connect, provider):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    ann.get_received()
    bob.get_received()
    provider.fail = True

    ack = ann.emit('getQuestion', None, callback=True)

    assert isinstance(ack, str) and ack
    assert _received(ann) == []
    assert _received(bob) == []


def test_disconnect_updates_remaining_members(connect):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    bob.get_received()

    ann.disconnect()

    received = _received(bob)
    assert [_payload(p)['text'] for p in received if p['name'] == 'message'] == ['Ann has left!']
    assert [_payload(p)['players'] for p in received if p['name'] == 'room'] == [[{'playerName': 'Bob'}]]


def test_leave_then_rejoin_other_room(connect):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    ann.get_received()
    bob.get_received()

    assert not ann.emit('leave', None, callback=True)
    assert [m['text'] for m in _events(bob, 'message')] == ['Ann has left!']

    assert not _join(ann, 'Ann', room='kitchen')
    ann.get_received()
    bob.emit('sendMessage', 'still here?', callback=True)
    assert _events(ann, 'message') == []


def test_only_member_leaving_mid_fetch_does_not_break_handler(connect, client, provider):
    ann, carl = connect(), connect()
    _join(ann, 'Ann')
    _join(carl, 'Carl', room='elsewhere')
    carl.get_received()
    provider.on_fetch = ann.disconnect

    # Returns normally: the question goes out to a now-empty room.
    ann.emit('getQuestion', None, callback=True)

    state = client.get('/api/rooms/lobby').get_json()
    assert state['players'] == []
    assert state['round']['status'] == 'question_posted'
    assert _received(carl) == []


def test_unexpected_provider_error_is_acked_with_message(connect, provider):
    ann, bob = connect(), connect()
    _join(ann, 'Ann')
    _join(bob, 'Bob')
    ann.get_received()
    bob.get_received()

    def _explode():
        raise KeyError(0)

    provider.on_fetch = _explode

    ack = ann.emit('getQuestion', None, callback=True)

    assert isinstance(ack, str) and ack
    assert _received(ann) == []
    assert _received(bob) == []
