# Client -> server
CONNECT = "connect"
DISCONNECT = "disconnect"
JOIN = "join"
LEAVE = "leave"
SEND_MESSAGE = "sendMessage"
GET_QUESTION = "getQuestion"
SEND_ANSWER = "sendAnswer"
GET_ANSWER = "getAnswer"

# Server -> client
MESSAGE = "message"
ROOM = "room"
QUESTION = "question"
ANSWER = "answer"
CORRECT_ANSWER = "correctAnswer"
