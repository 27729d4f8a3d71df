"""
Normalization of upstream video payloads.

The upstream API has shipped several payload shapes: fields wrapped under
``data``, fields flattened at the top level, and different names for the
playable URL depending on the API version. Every logical field is resolved
from an ordered table of ``FieldRule``s; the first rule yielding a non-empty
value wins. Type mismatches never raise, they degrade to the field default.
"""
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from toksave.core.errors import MissingPlayUrl, UnrecognizedShape, UpstreamReportedError
from toksave.models.record import (
    DEFAULT_AVATAR_URL,
    DEFAULT_DISPLAY_NAME,
    DEFAULT_HANDLE,
    DEFAULT_TITLE,
    DEFAULT_TRACK_AUTHOR,
    DEFAULT_TRACK_TITLE,
    Author,
    CanonicalVideoRecord,
    Track,
)
from toksave.utils.hash import stable_token


def as_text(value: Any) -> Optional[str]:
    """Coerce a scalar to a non-empty string, or None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        return text or None
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # past the int-to-str digit limit
            return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return str(int(value)) if value.is_integer() else str(value)
    return None


def as_str(value: Any) -> Optional[str]:
    """Accept only actual non-blank strings"""
    if isinstance(value, str):
        return value.strip() or None
    return None


def as_seconds(value: Any) -> Optional[float]:
    """Coerce to a finite, non-negative number of seconds, or None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


@dataclass(frozen=True)
class FieldRule:
    """One candidate location for a logical field"""
    path: Tuple[str, ...]
    extract: Callable[[Any], Any] = as_text

    def apply(self, data: dict) -> Any:
        node: Any = data
        for key in self.path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return self.extract(node)


def rules(*paths: str, extract: Callable[[Any], Any] = as_text) -> Tuple[FieldRule, ...]:
    return tuple(FieldRule(tuple(p.split(".")), extract) for p in paths)


# Fields whose presence at the top level marks a flattened payload
DATA_MARKER_RULES = rules("play", "id", "video_link_nwm")

PLAY_URL_RULES = rules("video_link_nwm_hd", "video_link_nwm", "play", "url")
WATERMARKED_URL_RULES = rules("video_link_wm", "wmplay")
ID_RULES = rules("_id", "id", "aweme_id")
TITLE_RULES = rules("title", "desc")
COVER_RULES = rules("cover", "origin_cover")
DURATION_RULES = rules("duration", extract=as_seconds)
AUTHOR_NAME_RULES = rules("author.nickname")
AUTHOR_HANDLE_RULES = rules("author.unique_id")
AUTHOR_AVATAR_RULES = rules("author.avatar")
TRACK_TITLE_RULES = rules("music_info.title", "music.title")
TRACK_AUTHOR_RULES = rules("music_info.author", "music.author")
TRACK_URL_RULES = rules("music", "music.uri", extract=as_str)

ERROR_MESSAGE_RULES = rules("msg", "message", extract=as_str)


def resolve(data: dict, field_rules: Sequence[FieldRule], default: Any = None) -> Any:
    """Evaluate rules in priority order; first non-empty value wins"""
    for rule in field_rules:
        value = rule.apply(data)
        if value is not None:
            return value
    return default


def locate_data(payload: Any) -> Optional[dict]:
    """Find the object holding video fields, wrapped or flattened"""
    if not isinstance(payload, dict):
        return None

    data = payload.get("data")
    if isinstance(data, dict):
        return data

    if resolve(payload, DATA_MARKER_RULES) is not None:
        return payload

    return None


def generated_id(play_url: str) -> str:
    # Derived from the play URL so that repeated normalization stays stable
    return f"gen_{stable_token(play_url)}"


def normalize(payload: Any) -> CanonicalVideoRecord:
    """
    Build a canonical record from an arbitrary upstream payload.

    Raises MissingPlayUrl when video data exists without a playable URL,
    UpstreamReportedError when upstream explained the failure itself and
    UnrecognizedShape otherwise.
    """
    data = locate_data(payload)

    if data is None:
        message = resolve(payload, ERROR_MESSAGE_RULES) if isinstance(payload, dict) else None
        if message:
            raise UpstreamReportedError(message)
        raise UnrecognizedShape()

    play_url = resolve(data, PLAY_URL_RULES)
    if not play_url:
        raise MissingPlayUrl()

    return CanonicalVideoRecord(
        id=resolve(data, ID_RULES) or generated_id(play_url),
        title=resolve(data, TITLE_RULES, DEFAULT_TITLE),
        cover_url=resolve(data, COVER_RULES, ""),
        play_url=play_url,
        watermarked_play_url=resolve(data, WATERMARKED_URL_RULES, play_url),
        duration_seconds=resolve(data, DURATION_RULES, 0.0),
        author=Author(
            display_name=resolve(data, AUTHOR_NAME_RULES, DEFAULT_DISPLAY_NAME),
            handle=resolve(data, AUTHOR_HANDLE_RULES, DEFAULT_HANDLE),
            avatar_url=resolve(data, AUTHOR_AVATAR_RULES, DEFAULT_AVATAR_URL),
        ),
        track=Track(
            title=resolve(data, TRACK_TITLE_RULES, DEFAULT_TRACK_TITLE),
            author=resolve(data, TRACK_AUTHOR_RULES, DEFAULT_TRACK_AUTHOR),
            url=resolve(data, TRACK_URL_RULES, ""),
        ),
    )
