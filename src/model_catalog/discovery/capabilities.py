"""Heuristic capability classification for catalog entries.

Free-text model metadata is classified by an ordered chain of rules. Each
rule has a trigger keyword set; the first rule whose trigger matches decides
the outcome and later rules are skipped. The chain is evaluated 3D, audio,
video, then the image default, so e.g. a "3D video" model is classified as 3D.

Sources that publish an explicit category use ``classify_category`` instead,
which is a straight table lookup against an allow-list.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..models import Capability


@dataclass(frozen=True)
class KeywordSet:
    """A set of substrings matched against lowercase text."""

    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


@dataclass(frozen=True)
class CapabilityRule:
    """One tier of the classification chain.

    Attributes:
        name: Tier name, used in logs and tests.
        trigger: Keywords that select this tier. None matches any text.
        base: Capability assigned when the tier is selected.
        refine: Optional keywords that select ``refined``.
        refined: Capability used when ``refine`` matches.
        additive: If True, ``refined`` is appended to ``base`` instead of replacing it.
    """

    name: str
    trigger: Optional[KeywordSet]
    base: Capability
    refine: Optional[KeywordSet] = None
    refined: Optional[Capability] = None
    additive: bool = False

    def applies(self, text: str) -> bool:
        return self.trigger is None or self.trigger.matches(text)

    def outcome(self, text: str) -> list[Capability]:
        if self.refine is None or self.refined is None or not self.refine.matches(text):
            return [self.base]
        if self.additive:
            return [self.base, self.refined]
        return [self.refined]


class CapabilityClassifier:
    """Evaluates a rule chain top to bottom, returning the first match."""

    def __init__(self, rules: list[CapabilityRule]):
        if not rules or rules[-1].trigger is not None:
            raise ValueError("Rule chain must end with a catch-all rule")
        self.rules = rules

    def match_rule(self, text: str) -> CapabilityRule:
        """Return the first rule that applies to the text."""
        lowered = text.lower()
        for rule in self.rules:
            if rule.applies(lowered):
                return rule
        return self.rules[-1]

    def classify(self, text: str) -> list[Capability]:
        """Classify free text into an ordered list of capabilities."""
        lowered = text.lower()
        return self.match_rule(lowered).outcome(lowered)


def build_search_text(*parts: Optional[str]) -> str:
    """Join non-empty metadata fields into one lowercase string."""
    return " ".join(p for p in parts if p).lower()


IMAGE_HINTS = KeywordSet(("image", "img", "photo"))
IMAGE_TO_VIDEO_HINTS = KeywordSet(("img2vid", "image-to-video", "i2v"))
AUDIO_KEYWORDS = KeywordSet(
    ("music", "audio", "tts", "text-to-speech", "speech", "sound effect", "voice")
)


def make_chain(
    three_d: Iterable[str],
    audio: Iterable[str],
    video: Iterable[str],
    image_edit: Iterable[str],
) -> list[CapabilityRule]:
    """Build the standard 3D -> audio -> video -> image chain from vocabularies."""
    return [
        CapabilityRule(
            name="3d",
            trigger=KeywordSet(tuple(three_d)),
            base=Capability.TEXT_TO_3D,
            refine=IMAGE_HINTS,
            refined=Capability.IMAGE_TO_3D,
        ),
        CapabilityRule(
            name="audio",
            trigger=KeywordSet(tuple(audio)),
            base=Capability.TEXT_TO_AUDIO,
        ),
        CapabilityRule(
            name="video",
            trigger=KeywordSet(tuple(video)),
            base=Capability.TEXT_TO_VIDEO,
            refine=IMAGE_TO_VIDEO_HINTS,
            refined=Capability.IMAGE_TO_VIDEO,
        ),
        CapabilityRule(
            name="image",
            trigger=None,
            base=Capability.TEXT_TO_IMAGE,
            refine=KeywordSet(tuple(image_edit)),
            refined=Capability.IMAGE_TO_IMAGE,
            additive=True,
        ),
    ]


REPLICATE_CLASSIFIER = CapabilityClassifier(
    make_chain(
        three_d=(
            "3d",
            "mesh",
            "triposr",
            "tripo",
            "hunyuan3d",
            "instant-mesh",
            "point-e",
            "shap-e",
        ),
        audio=AUDIO_KEYWORDS.keywords + ("bark", "xtts"),
        video=("video", "animate", "motion", "luma", "kling", "minimax"),
        image_edit=("img2img", "image-to-image", "inpaint", "controlnet", "upscale", "restore"),
    )
)

WAVESPEED_CLASSIFIER = CapabilityClassifier(
    make_chain(
        three_d=("3d", "mesh", "tripo", "hunyuan3d"),
        audio=AUDIO_KEYWORDS.keywords,
        video=(
            "video",
            "animate",
            "motion",
            "wan",
            "kling",
            "luma",
            "minimax",
            "i2v",
            "t2v",
        ),
        image_edit=(
            "img2img",
            "image-to-image",
            "inpaint",
            "controlnet",
            "upscale",
            "edit",
            "kontext",
        ),
    )
)


# Categories accepted from sources that tag models explicitly
CATEGORY_ALIASES: dict[str, Capability] = {
    "text-to-speech": Capability.TEXT_TO_AUDIO,
    "text-to-music": Capability.TEXT_TO_AUDIO,
    "text-to-sound-effects": Capability.TEXT_TO_AUDIO,
}

RELEVANT_CATEGORIES: frozenset[str] = frozenset(
    [c.value for c in Capability if c is not Capability.TEXT_TO_AUDIO] + list(CATEGORY_ALIASES)
)


def classify_category(category: Optional[str]) -> Optional[Capability]:
    """Map an explicit category string to a capability.

    Returns:
        The capability, or None if the category is not in the allow-list.
    """
    if not category:
        return None
    if category in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[category]
    if category in RELEVANT_CATEGORIES:
        return Capability(category)
    return None
