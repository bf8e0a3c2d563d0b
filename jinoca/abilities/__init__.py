"""Abilities Jinoca can perform besides chatting."""

from .image_gen import GeneratedImage, ImageGenerator

__all__ = ["GeneratedImage", "ImageGenerator"]
