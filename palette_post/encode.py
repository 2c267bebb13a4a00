# palette_post/encode.py
from __future__ import annotations

"""
PNG and GIF encoding with Pillow.

Exports:
  COMPRESSION_LEVELS                              name -> zlib level for PNG
  frame_to_image(frame) -> PIL.Image              "P" for paletted, "RGBA" for generic
  encode_png(stream, frame, compress_level, dest)
  encode_gif(stream, image, strategy, dest)       one static frame
  encode_animation(stream, buffer, dest)          one GIF frame per buffered frame

Notes:
  - GIF palettes are written as RGB; the first fully transparent entry becomes
    the transparency index.
  - optimize=False everywhere so Pillow never reorders or drops palette
    entries; the indices written are the indices post-processing produced.
  - OSError from the stream is re-raised as OutputIOError, anything the
    encoder rejects as EncodingError, both naming the destination.
"""

from contextlib import contextmanager
from typing import Any, BinaryIO, Dict, Iterator, Optional, Union

import numpy as np
from PIL import GifImagePlugin, Image

from .animation import AnimationBuffer
from .core_types import Frame, PalettedFrame, U8Image, U8Palette
from .errors import EncodingError, OutputIOError
from .quantize import QuantizeStrategy, quantize_for_encoding

COMPRESSION_LEVELS: Dict[str, int] = {
    "default": 6,
    "no": 0,
    "speed": 1,
    "size": 9,
}


@contextmanager
def _wrapped(fmt: str, dest: str) -> Iterator[None]:
    try:
        yield
    except (EncodingError, OutputIOError):
        raise
    except OSError as e:
        raise OutputIOError(dest, e) from e
    except (ValueError, TypeError, KeyError) as e:
        raise EncodingError(fmt, dest, e) from e


def _paletted_image(indices: np.ndarray, palette: U8Palette) -> Image.Image:
    H, W = indices.shape
    im = Image.frombytes("P", (W, H), np.ascontiguousarray(indices).tobytes())
    im.putpalette(np.ascontiguousarray(palette[:, :3]).tobytes(), rawmode="RGB")
    return im


def transparent_index(palette: U8Palette) -> Optional[int]:
    """First palette index with alpha 0, or None."""
    hits = np.flatnonzero(palette[:, 3] == 0)
    return int(hits[0]) if hits.size else None


def frame_to_image(frame: Frame) -> Image.Image:
    """Pillow image for a frame. Palette alpha is stored in info['transparency']."""
    if frame.kind == "paletted":
        assert isinstance(frame, PalettedFrame)
        im = _paletted_image(frame.indices, frame.palette)
        alpha = frame.palette[:, 3]
        if np.any(alpha != 255):
            im.info["transparency"] = alpha.astype(np.uint8).tobytes()
        return im
    return Image.fromarray(np.ascontiguousarray(frame.to_rgba()))


def encode_png(
    stream: BinaryIO, frame: Frame, compress_level: int, dest: str = "stdout"
) -> None:
    with _wrapped("png", dest):
        im = frame_to_image(frame)
        params: Dict[str, Any] = {"compress_level": int(compress_level)}
        if "transparency" in im.info:
            params["transparency"] = im.info["transparency"]
        im.save(stream, format="PNG", **params)


def _gif_params(palette: U8Palette) -> Dict[str, Any]:
    params: Dict[str, Any] = {"optimize": False}
    t = transparent_index(palette)
    if t is not None:
        params["transparency"] = t
    return params


def encode_gif(
    stream: BinaryIO,
    image: Union[U8Image, Frame],
    strategy: QuantizeStrategy,
    dest: str = "stdout",
) -> None:
    """Write one static GIF frame quantised by the given strategy."""
    with _wrapped("gif", dest):
        frame = quantize_for_encoding(image, strategy)
        if frame.palette.shape[0] > 256:
            raise ValueError("GIF supports at most 256 palette entries")
        im = _paletted_image(frame.indices, frame.palette)
        im.save(stream, format="GIF", **_gif_params(frame.palette))


def encode_animation(
    stream: BinaryIO, buffer: AnimationBuffer, dest: str = "stdout"
) -> None:
    """
    Write every buffered frame as one animated GIF.

    The stream is assembled from GifImagePlugin.getheader/getdata rather than
    save_all, which would merge identical consecutive frames. Frame i of the
    file is frame i of the buffer, with delay buffer.delays[i].
    """
    with _wrapped("gif", dest):
        buffer.finalize()
        config = buffer.config
        if config is None or not buffer.frames:
            raise ValueError("animation has no frames")
        if config.palette.shape[0] > 256:
            raise ValueError("GIF supports at most 256 palette entries")

        images = [_paletted_image(f.indices, config.palette) for f in buffer.frames]
        t = transparent_index(config.palette)
        frame_params: Dict[str, Any] = {} if t is None else {"transparency": t}

        info = _gif_params(config.palette)
        info["duration"] = buffer.delays[0] * 10
        if buffer.loop_count >= 0:
            info["loop"] = buffer.loop_count
        header, _used = GifImagePlugin.getheader(images[0], info=info)
        for chunk in header:
            stream.write(chunk)

        for im, delay in zip(images, buffer.delays):
            chunks = GifImagePlugin.getdata(im, duration=delay * 10, **frame_params)
            for chunk in chunks:
                stream.write(chunk)
        stream.write(b";")


__all__ = [
    "COMPRESSION_LEVELS",
    "transparent_index",
    "frame_to_image",
    "encode_png",
    "encode_gif",
    "encode_animation",
]
