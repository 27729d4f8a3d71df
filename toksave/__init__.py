"""Watermark-free TikTok link retrieval with a local download history."""

__version__ = "1.0.0"
