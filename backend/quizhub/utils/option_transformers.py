"""Conversions between stored `Option` rows and API `OptionIn` models.

Rows written before the content system have no `content_type`; rows
with the retired `image` content type are upgraded to `mixed` content
with empty text so the editor can add captions later.
"""

from typing import Iterable, List, Optional

from .. import models
from ..schemas import OptionContent, OptionIn, OptionMixedContent, OptionTextContent

DB_OPTION_FIELDS = (
    "id",
    "text",
    "text_sl",
    "text_hr",
    "image_url",
    "alt_text",
    "alt_text_sl",
    "alt_text_hr",
    "content_type",
    "image_suffix",
    "image_suffix_sl",
    "image_suffix_hr",
    "correct",
)


def _content_from_row(row: models.Option) -> OptionContent:
    content_type = row.content_type or "text"
    if content_type == "image":
        return OptionMixedContent(text="", text_sl="", text_hr="", image_url=row.image_url or None)
    if content_type == "mixed":
        return OptionMixedContent(
            text=row.text or None,
            text_sl=row.text_sl or None,
            text_hr=row.text_hr or None,
            image_url=row.image_url or None,
        )
    return OptionTextContent(text=row.text or None, text_sl=row.text_sl or None, text_hr=row.text_hr or None)


def db_option_to_app(row: models.Option) -> OptionIn:
    """Build the API representation of a stored option.

    Rows with image data or an explicit content type get a `content`
    union; plain legacy rows keep only the flat text fields.
    """
    uses_content = bool(row.image_url) or bool(row.content_type)
    return OptionIn(
        id=str(row.id) if row.id is not None else None,
        text=row.text,
        text_sl=row.text_sl,
        text_hr=row.text_hr,
        content=_content_from_row(row) if uses_content else None,
        is_correct=row.correct,
    )


def _nulls(**values) -> dict:
    out = {name: None for name in DB_OPTION_FIELDS}
    out.update(values)
    return out


def app_option_to_db_input(option: OptionIn) -> dict:
    """Flatten an API option into the column set of an `Option` row.

    The returned dict always carries every field in `DB_OPTION_FIELDS`;
    `content_type` defaults to `text` when the option has no content.
    """
    content = option.content
    if isinstance(content, OptionMixedContent):
        return _nulls(
            id=option.id,
            text=content.text or None,
            text_sl=content.text_sl or None,
            text_hr=content.text_hr or None,
            image_url=content.image_url or None,
            content_type="mixed",
            correct=option.is_correct,
        )
    if isinstance(content, OptionTextContent):
        return _nulls(
            id=option.id,
            text=content.text or None,
            text_sl=content.text_sl or None,
            text_hr=content.text_hr or None,
            content_type="text",
            correct=option.is_correct,
        )
    return _nulls(
        id=option.id,
        text=option.text,
        text_sl=option.text_sl,
        text_hr=option.text_hr,
        content_type="text",
        correct=option.is_correct,
    )


def db_options_to_app(rows: Iterable[models.Option]) -> List[OptionIn]:
    return [db_option_to_app(r) for r in rows]


def app_options_to_db_inputs(options: Optional[Iterable[OptionIn]]) -> List[dict]:
    return [app_option_to_db_input(o) for o in options or []]
