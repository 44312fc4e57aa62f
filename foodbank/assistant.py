"""Task layer: one method per request type sent to the generation transport."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from . import prompts
from .cancel import CancelToken, run_cancellable
from .config import LLMConfig
from .llm import PDF_MEDIA_TYPE, Attachment, GenerationTransport
from .models import (
    ExtractedNutrition,
    ExtractedReceipt,
    ExtractedReceiptItem,
    HouseholdMember,
    MatchResult,
    SuggestedFoodInfo,
    SuggestedNutritionTargets,
)
from .normalize import (
    parse_food_info,
    parse_items,
    parse_match,
    parse_nutrition,
    parse_receipt,
    parse_targets,
)
from .nutrition.record import NutritionRecord
from .ocr.images import encode_jpeg
from .ocr.pdf import render_pdf_page

if TYPE_CHECKING:
    import numpy as np

    from .ocr import TextExtractor

logger = logging.getLogger(__name__)


def _one_input(image, text, pdf) -> None:
    given = sum(x is not None for x in (image, text, pdf))
    if given != 1:
        raise ValueError("Exactly one of image, text or pdf must be given")


class FoodAssistant:
    """Build prompts, call the transport and normalize the replies.

    Image requests are sent as JPEG attachments; when a ``TextExtractor`` is
    supplied the recognized text is appended to the prompt as well. PDF bytes
    go out as a document attachment, or as a rendered first page for
    transports that do not accept PDFs; a PDF's own text layer is preferred
    over OCR. Recognition and rendering run in a worker thread.
    """

    def __init__(
        self,
        transport: GenerationTransport,
        extractor: TextExtractor | None = None,
        config: LLMConfig | None = None,
    ) -> None:
        self._transport = transport
        self._extractor = extractor
        self._config = config or LLMConfig()

    @property
    def transport(self) -> GenerationTransport:
        return self._transport

    async def _off_loop(self, fn, *args, cancel: CancelToken | None = None):
        """Run blocking OCR or rendering in a worker thread, racing *cancel*."""
        return await run_cancellable(asyncio.to_thread(fn, *args), cancel)

    async def _ask(
        self,
        prompt: str,
        *,
        image: np.ndarray | None = None,
        pdf: bytes | None = None,
        max_tokens: int | None = None,
        cancel: CancelToken | None = None,
    ) -> str:
        attachment = None
        if pdf is not None:
            if self._extractor is not None:
                prompt = await self._off_loop(
                    self._extractor.augment_pdf_prompt, prompt, pdf, cancel=cancel
                )
            if self._transport.accepts_pdf:
                attachment = Attachment(pdf, PDF_MEDIA_TYPE)
            else:
                logger.info(
                    "%s does not accept PDFs; sending the first page as an image",
                    self._transport.name,
                )
                page = await self._off_loop(render_pdf_page, pdf, cancel=cancel)
                attachment = Attachment(encode_jpeg(page), "image/jpeg")
        elif image is not None:
            if self._extractor is not None:
                prompt = await self._off_loop(
                    self._extractor.augment_prompt, prompt, image, cancel=cancel
                )
            attachment = Attachment(encode_jpeg(image), "image/jpeg")

        if max_tokens is None:
            max_tokens = (
                self._config.vision_max_tokens if attachment else self._config.max_tokens
            )

        logger.debug(
            "Sending %d-char prompt to %s (attachment=%s)",
            len(prompt),
            self._transport.name or type(self._transport).__name__,
            attachment.media_type if attachment else None,
        )
        return await run_cancellable(
            self._transport.generate(prompt, attachment, max_tokens), cancel
        )

    async def extract_receipt(
        self,
        *,
        image: np.ndarray | None = None,
        text: str | None = None,
        pdf: bytes | None = None,
        cancel: CancelToken | None = None,
    ) -> ExtractedReceipt:
        _one_input(image, text, pdf)
        filter_baby = self._config.filter_baby_food
        if text is not None:
            prompt = prompts.receipt_text_prompt(text, filter_baby)
        else:
            prompt = prompts.receipt_image_prompt(filter_baby)
        reply = await self._ask(
            prompt,
            image=image,
            pdf=pdf,
            max_tokens=self._config.vision_max_tokens,
            cancel=cancel,
        )
        return parse_receipt(reply)

    async def extract_meal_items(
        self,
        *,
        image: np.ndarray | None = None,
        text: str | None = None,
        pdf: bytes | None = None,
        cancel: CancelToken | None = None,
    ) -> list[ExtractedReceiptItem]:
        _one_input(image, text, pdf)
        if text is not None:
            prompt = prompts.meal_text_prompt(text)
        else:
            prompt = prompts.meal_image_prompt()
        reply = await self._ask(
            prompt,
            image=image,
            pdf=pdf,
            max_tokens=self._config.vision_max_tokens,
            cancel=cancel,
        )
        return parse_items(reply)

    async def extract_nutrition_label(
        self,
        *,
        image: np.ndarray | None = None,
        text: str | None = None,
        pdf: bytes | None = None,
        cancel: CancelToken | None = None,
    ) -> ExtractedNutrition:
        _one_input(image, text, pdf)
        if text is not None:
            prompt = prompts.nutrition_label_text_prompt(text)
        else:
            prompt = prompts.nutrition_label_image_prompt()
        reply = await self._ask(prompt, image=image, pdf=pdf, cancel=cancel)
        return parse_nutrition(reply)

    async def estimate_nutrition(
        self,
        food_name: str,
        category: str,
        cancel: CancelToken | None = None,
    ) -> ExtractedNutrition:
        reply = await self._ask(
            prompts.estimate_nutrition_prompt(food_name, category), cancel=cancel
        )
        result = parse_nutrition(reply)
        if result.food_name is None:
            result.food_name = food_name
        return result

    async def fill_empty_nutrition(
        self,
        food_name: str,
        category: str,
        existing: NutritionRecord,
        cancel: CancelToken | None = None,
    ) -> NutritionRecord:
        """Estimate the nutrients still at zero; known values are kept."""
        reply = await self._ask(
            prompts.fill_empty_nutrition_prompt(food_name, category, existing.to_dict()),
            cancel=cancel,
        )
        estimated = parse_nutrition(reply).nutrition.values()
        merged = {
            name: value if value else estimated[name]
            for name, value in existing.values().items()
        }
        return NutritionRecord(**merged)

    async def match_food(
        self,
        item_name: str,
        existing_foods: list[str],
        cancel: CancelToken | None = None,
    ) -> MatchResult:
        if not existing_foods:
            return MatchResult.no_match()
        reply = await self._ask(
            prompts.match_food_prompt(item_name, existing_foods), cancel=cancel
        )
        return parse_match(reply)

    async def suggest_category_and_tags(
        self,
        food_name: str,
        available_tags: list[str],
        cancel: CancelToken | None = None,
    ) -> SuggestedFoodInfo:
        reply = await self._ask(
            prompts.suggest_category_prompt(food_name, available_tags), cancel=cancel
        )
        info = parse_food_info(reply)
        # Only tags that already exist may be suggested
        known = {t.lower(): t for t in available_tags}
        info.tags = [known[t.lower()] for t in info.tags if t.lower() in known]
        return info

    async def suggest_nutrition_targets(
        self,
        members: list[HouseholdMember],
        cancel: CancelToken | None = None,
    ) -> SuggestedNutritionTargets:
        reply = await self._ask(prompts.nutrition_targets_prompt(members), cancel=cancel)
        return parse_targets(reply)

    async def validate_credentials(self) -> None:
        """Send a minimal request; raises ``ExtractionFailure`` if the key is rejected."""
        await self._transport.generate("Hi", None, 1)
