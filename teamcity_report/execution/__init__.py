"""Result buffering, the line event state machine and the streaming driver."""
