"""HTTP boundary types: the request handed to handlers and the response sink."""
