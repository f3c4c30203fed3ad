"""ASGI server layer — turns ASGI messages into dispatches and back."""
