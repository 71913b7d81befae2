"""Capability profile: what one execution environment can run.

A profile is read-only after construction and safe to share between jobs.
Missing ``decoders`` (or a missing entry for a track type) and missing
``filters`` mean "accept everything". A defined map means "only what is
listed".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CapabilityProfile:
    """Encoders, decoders and filters available to the transcoding engine.

    Attributes:
        encoders: Codec name to ffmpeg encoder name.
        decoders: Track type to (codec name to decoder name). None, or no
            entry for a track type, accepts every codec of that type.
        filters: Filter name to the alias to use in filter graphs. None
            accepts every filter under its own name.
        codec_blacklist: Lower-cased codec names whose tracks are never
            mapped into outputs.
        hw_decoder: Value for ``-hwaccel`` when an explicit decoder is used.
        max_instances: Advisory concurrency limit for callers that queue
            jobs. Not enforced here.
    """

    encoders: Mapping[str, str] = field(default_factory=dict)
    decoders: Mapping[str, Mapping[str, str]] | None = None
    filters: Mapping[str, str] | None = None
    codec_blacklist: frozenset[str] = frozenset()
    hw_decoder: str | None = None
    max_instances: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "codec_blacklist",
            frozenset(c.casefold() for c in self.codec_blacklist),
        )

    @classmethod
    def create(
        cls,
        encoders: Mapping[str, str],
        decoders: Mapping[str, Mapping[str, str]] | None = None,
        filters: Mapping[str, str] | None = None,
        codec_blacklist: Iterable[str] = (),
        hw_decoder: str | None = None,
        max_instances: int | None = None,
    ) -> CapabilityProfile:
        """Build a profile from plain mappings and an iterable blacklist."""
        return cls(
            encoders=encoders,
            decoders=decoders,
            filters=filters,
            codec_blacklist=frozenset(codec_blacklist),
            hw_decoder=hw_decoder,
            max_instances=max_instances,
        )

    def get_encoder(self, codec: str) -> str | None:
        """Return the encoder for ``codec``, or None if not available."""
        return self.encoders.get(codec)

    def can_encode(self, codec: str) -> bool:
        return codec in self.encoders

    def _decoder_map(self, track_type: str) -> Mapping[str, str] | None:
        if self.decoders is None:
            return None
        return self.decoders.get(track_type)

    def can_decode(self, codec: str | None, track_type: str) -> bool:
        """Check whether tracks of this codec and type can be decoded."""
        decoders = self._decoder_map(track_type)
        if decoders is None:
            return True
        return codec is not None and codec in decoders

    def decoder_for(self, codec: str | None, track_type: str) -> str | None:
        """Return the explicit decoder to force for a track.

        None means ffmpeg picks the decoder (no decoder map for the type).
        Callers check can_decode first.
        """
        decoders = self._decoder_map(track_type)
        if decoders is None or codec is None:
            return None
        return decoders.get(codec)

    def can_filter(self, name: str) -> bool:
        if self.filters is None:
            return True
        return name in self.filters

    def filter_alias(self, name: str) -> str:
        """Return the name to use for filter ``name`` in a filter graph.

        Raises:
            KeyError: If a filter map is defined and lacks ``name``.
        """
        if self.filters is None:
            return name
        return self.filters[name]

    def is_blacklisted(self, codec: str | None) -> bool:
        return codec is not None and codec.casefold() in self.codec_blacklist
