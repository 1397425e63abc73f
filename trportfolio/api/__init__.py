"""REST and websocket clients, tokens, headers and websocket messages."""