"""Jinoca — WhatsApp persona bot relaying chats to an LLM and an image generator."""

__version__ = "0.1.0"
