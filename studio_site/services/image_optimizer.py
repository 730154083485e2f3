# Copyright (c) 2025 Trae AI. All rights reserved.

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Mapping, Optional, Tuple
from PIL import Image, ImageOps

OPTIMIZABLE_EXT = {".jpg", ".jpeg", ".png", ".webp"}
DEFAULT_QUALITY = 80

_FORMATS = {
    "webp": ("WEBP", "image/webp"),
    "jpeg": ("JPEG", "image/jpeg"),
    "jpg": ("JPEG", "image/jpeg"),
}
_EXT_FORMATS = {
    ".jpg": ("JPEG", "image/jpeg"),
    ".jpeg": ("JPEG", "image/jpeg"),
    ".png": ("PNG", "image/png"),
    ".webp": ("WEBP", "image/webp"),
}


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class OptimizeParams:
    quality: int = DEFAULT_QUALITY
    width: Optional[int] = None
    fmt: Optional[str] = None

    @classmethod
    def from_query(cls, args: Mapping[str, str]) -> Optional["OptimizeParams"]:
        """
        Parses q/w/f query parameters. Returns None when none were given.
        """
        if not any(args.get(k) for k in ("q", "w", "f")):
            return None
        quality = _to_int(args.get("q")) or DEFAULT_QUALITY
        width = _to_int(args.get("w"))
        fmt = (args.get("f") or "").lower() or None
        return cls(
            quality=max(1, min(100, quality)),
            width=width if width and width > 0 else None,
            fmt=fmt if fmt in _FORMATS else None,
        )


def can_optimize(path: Path) -> bool:
    return path.suffix.lower() in OPTIMIZABLE_EXT


def optimize_image(path: Path, params: OptimizeParams) -> Tuple[bytes, str]:
    """
    Resize (never enlarge) and re-encode an image. Returns (bytes, mimetype).
    """
    pil_format, mimetype = _FORMATS.get(params.fmt) or _EXT_FORMATS[path.suffix.lower()]

    with Image.open(path) as im:
        im = ImageOps.exif_transpose(im)
        w, h = im.size
        if params.width and params.width < w:
            new_h = max(1, round(h * (params.width / float(w))))
            im = im.resize((params.width, new_h), Image.LANCZOS)

        buf = BytesIO()
        if pil_format == "JPEG":
            if im.mode not in ("RGB", "L"):
                im = im.convert("RGB")
            im.save(buf, format="JPEG", quality=params.quality, progressive=True, optimize=True)
        elif pil_format == "WEBP":
            im.save(buf, format="WEBP", quality=params.quality)
        else:
            im.save(buf, format="PNG", optimize=True)
        return buf.getvalue(), mimetype
