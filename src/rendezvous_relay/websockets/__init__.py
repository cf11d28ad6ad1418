"""
WebSocket transport for the rendezvous relay: the relay server and a client.
"""
