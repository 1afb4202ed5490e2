"""Option content helpers.

Options exist in two shapes at once: legacy options carry flat
multilingual text fields, newer ones also carry a `content` union
(`text` or `mixed`). Call sites read options through the accessors in
this module so they do not care which shape they were given.
"""

from typing import Literal, Optional

from ..schemas import OptionIn, OptionMixedContent, OptionTextContent

Language = Literal["en", "sl", "hr"]
ContentType = Literal["text", "mixed"]


def has_content_system(option: OptionIn) -> bool:
    """True if the option uses the content union rather than legacy fields only."""
    return option.content is not None


def get_option_content_type(option: OptionIn) -> ContentType:
    """Content type of `option`; legacy options count as `text`."""
    if option.content is not None:
        return option.content.type
    return "text"


def _localized(source, language: str) -> str:
    if language == "sl" and source.text_sl:
        return source.text_sl
    if language == "hr" and source.text_hr:
        return source.text_hr
    return source.text or ""


def get_localized_option_text(option: OptionIn, language: str = "en") -> str:
    """Return the option text for `language`, falling back to the base text.

    The content union wins over legacy fields when present. Returns an
    empty string when nothing is set.
    """
    if option.content is not None:
        return _localized(option.content, language)
    return _localized(option, language)


def get_option_image_url(option: OptionIn) -> Optional[str]:
    """Image URL of a mixed-content option, otherwise None."""
    content = option.content
    if isinstance(content, OptionMixedContent):
        return content.image_url or None
    return None


def option_has_image(option: OptionIn) -> bool:
    return get_option_image_url(option) is not None


def _has_text(source) -> bool:
    return any((value or "").strip() for value in (source.text, source.text_sl, source.text_hr))


def is_valid_option(option: OptionIn) -> bool:
    """True if the option has text in at least one language, or an image (mixed)."""
    content = option.content
    if isinstance(content, OptionTextContent):
        return _has_text(content)
    if isinstance(content, OptionMixedContent):
        return _has_text(content) or bool((content.image_url or "").strip())
    return _has_text(option)


def legacy_option_to_content(option: OptionIn) -> OptionIn:
    """Return a copy of a legacy option with an equivalent text content union.

    Options that already have content are returned unchanged.
    """
    if option.content is not None:
        return option
    content = OptionTextContent(text=option.text, text_sl=option.text_sl, text_hr=option.text_hr)
    return option.model_copy(update={"content": content})


def content_to_legacy_option(option: OptionIn) -> OptionIn:
    """Copy text content back into the legacy flat fields.

    Mixed content cannot be expressed with legacy fields, so such options
    keep their content union and are returned unchanged.
    """
    content = option.content
    if not isinstance(content, OptionTextContent):
        return option
    return option.model_copy(
        update={"text": content.text, "text_sl": content.text_sl, "text_hr": content.text_hr}
    )


def create_default_option() -> OptionIn:
    """Blank text option used when the editor adds a new answer."""
    return OptionIn(
        text="",
        text_sl="",
        text_hr="",
        content=OptionTextContent(text="", text_sl="", text_hr=""),
        is_correct=False,
    )


def create_mixed_option(text: str, image_url: str) -> OptionIn:
    return OptionIn(content=OptionMixedContent(text=text, image_url=image_url), is_correct=False)
