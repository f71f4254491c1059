"""HTTP relay between a chat front-end and the OpenAI chat-completion API."""

__version__ = "0.1.0"
