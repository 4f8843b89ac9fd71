from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class StyleDescriptor:
    id: str
    display_name: str
    description: str
    prompt_fragment: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.display_name,
            "description": self.description,
        }


STYLES: tuple[StyleDescriptor, ...] = (
    StyleDescriptor(
        id="fantasy",
        display_name="Fantasy",
        description="Dragons, magic, and medieval adventures",
        prompt_fragment=(
            "Create an immersive fantasy world where magical elements serve as metaphors for learning concepts. "
            "Use rich descriptions of mystical environments, magical creatures, and enchanted items to illustrate "
            "educational points."
        ),
    ),
    StyleDescriptor(
        id="scifi",
        display_name="Sci-Fi",
        description="Space exploration and futuristic technology",
        prompt_fragment=(
            "Set the learning experience aboard an advanced starship or space station, using futuristic technology "
            "and scientific phenomena to explain concepts. Include detailed descriptions of advanced technology and "
            "space environments."
        ),
    ),
    StyleDescriptor(
        id="modern",
        display_name="Modern",
        description="Contemporary urban adventures",
        prompt_fragment=(
            "Frame the learning experience in a vivid contemporary setting, using detailed descriptions of urban "
            "environments, modern technology, and real-world scenarios to illustrate concepts."
        ),
    ),
    StyleDescriptor(
        id="apocalyptic",
        display_name="Apocalyptic",
        description="Survive in a post-apocalyptic world",
        prompt_fragment=(
            "Create a compelling post-apocalyptic world where knowledge is crucial for survival. Use detailed "
            "descriptions of the changed environment and survival challenges to frame learning concepts."
        ),
    ),
    StyleDescriptor(
        id="cyberpunk",
        display_name="Cyberpunk",
        description="High tech, low life in neon-lit cities",
        prompt_fragment=(
            "Set the scene in a neon-lit, high-tech dystopia where information and technology reign supreme. Use "
            "detailed descriptions of digital landscapes and advanced cyber-systems to explain concepts."
        ),
    ),
    StyleDescriptor(
        id="steampunk",
        display_name="Steampunk",
        description="Victorian-era technology and adventure",
        prompt_fragment=(
            "Create an alternate Victorian world filled with brass, steam, and mechanical marvels. Use detailed "
            "descriptions of ingenious contraptions and mechanical processes to illustrate learning concepts."
        ),
    ),
    StyleDescriptor(
        id="historical",
        display_name="Historical",
        description="Real historical events and settings",
        prompt_fragment=(
            "Transport learners to richly detailed historical settings, connecting concepts to significant events "
            "and discoveries. Include vivid descriptions of historical environments and authentic period details."
        ),
    ),
)

DEFAULT_STYLE = "fantasy"

_BY_ID = {s.id: s for s in STYLES}


def list_styles() -> list[StyleDescriptor]:
    return list(STYLES)


def get_style(style: str | StyleDescriptor) -> StyleDescriptor:
    if isinstance(style, StyleDescriptor):
        return style
    key = str(style or "").strip().lower()
    found = _BY_ID.get(key)
    if found is None:
        raise ValueError(f"Unknown style: {style!r}. Choose one of: {', '.join(_BY_ID)}")
    return found
