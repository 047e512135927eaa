"""
Flat-buffer exchange with bitmap collaborators.
"""

from .bitmap import decode_gray, decode_rgba, encode_gray, encode_rgba, from_pil, resize, to_pil

__all__ = ["encode_rgba", "decode_rgba", "encode_gray", "decode_gray", "to_pil", "from_pil", "resize"]
