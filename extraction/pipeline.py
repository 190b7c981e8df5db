"""
Batch extraction of tariff offers from uploaded contract documents.

For each file, sequentially:
    read text -> classify -> build prompt -> model call -> parse/normalize
    (or regex fallback when the output is unusable) -> tag with id + source file

Per-file problems (too large, unreadable, too short, model unreachable) never
abort the batch: the file contributes zero offers and a warning/error progress
event is emitted. Only precondition failures (missing model credential, no
current user) are raised, and they are raised before any file is read.

Collaborators are injected so the pipeline runs against fakes in tests.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional, Sequence, Tuple

from config import MAX_FILE_SIZE_MB, MAX_REQUEST_TEXT_CHARS, MIN_TEXT_CHARS
from domain.canonical import BatchResult, ExtractedOffer, ProcessingStep, RawDocument
from domain.errors import (
    CollaboratorUnavailableError,
    FileTooLargeError,
    MalformedResponseError,
    ReadError,
    StorageUnavailableError,
    UnauthenticatedError,
    UnsupportedFormatError,
)
from domain.upload import UploadedFile
from fields.normalization import is_unknown_supplier, normalize_offer
from input_readers import extract_text
from storage.offer_store import OfferStore, UserProvider

from .classifier import classify
from .fallback import fallback_extract
from .llm_client import CompletionClient, CompletionOptions
from .payload import Unparseable, parse_payload, payload_offers
from .prompts import EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[ProcessingStep], None]
TextExtractor = Callable[[UploadedFile], str]

INPUT_ERRORS = (FileTooLargeError, UnsupportedFormatError, ReadError)

# stage -> fraction of a file's share of the progress bar
STAGE_READ = 0.0
STAGE_ANALYSE = 0.3
STAGE_MODEL = 0.6
STAGE_DONE = 1.0


def _new_id() -> str:
    return str(uuid.uuid4())


class OfferExtractionPipeline:
    def __init__(
        self,
        completion: CompletionClient,
        text_extractor: TextExtractor = extract_text,
        store: Optional[OfferStore] = None,
        user_provider: Optional[UserProvider] = None,
        id_factory: Callable[[], str] = _new_id,
        options: Optional[CompletionOptions] = None,
        max_file_size_mb: int = MAX_FILE_SIZE_MB,
    ):
        self._completion = completion
        self._text_extractor = text_extractor
        self._store = store
        self._user_provider = user_provider
        self._id_factory = id_factory
        self.options = options or CompletionOptions()
        self.max_file_size_mb = max_file_size_mb

    # ------------------------------------------------------------------
    # Batch entry points
    # ------------------------------------------------------------------

    def process_files(
        self,
        files: Sequence[UploadedFile],
        on_progress: Optional[ProgressObserver] = None,
    ) -> List[ExtractedOffer]:
        """Extract offers from every file, in order; returns the merged offers."""
        self._completion.ensure_configured()

        emit = on_progress or (lambda step: None)
        total = len(files)
        all_offers: List[ExtractedOffer] = []

        emit(ProcessingStep("🚀 Starting AI analysis...", 0.0))

        for index, file in enumerate(files):
            all_offers.extend(self._process_file(file, index, total, emit))

        emit(ProcessingStep(f"🎉 Done! {len(all_offers)} offer(s) extracted in total", 100.0))
        logger.info(
            "Batch finished: %d file(s), %d offer(s), suppliers=%s",
            total,
            len(all_offers),
            sorted({o["fournisseur"] for o in all_offers}),
        )
        return all_offers

    def process_and_store(
        self,
        files: Sequence[UploadedFile],
        on_progress: Optional[ProgressObserver] = None,
    ) -> BatchResult:
        """Run a batch for the current user and persist its offers (best effort)."""
        if self._user_provider is None:
            raise UnauthenticatedError("No user provider configured")
        user_id = self._user_provider.current_user()["id"]

        steps: List[ProcessingStep] = []

        def observe(step: ProcessingStep) -> None:
            steps.append(step)
            if on_progress:
                on_progress(step)

        offers = self.process_files(files, observe)
        warnings = [s.step for s in steps if s.level != "info"]

        if offers and self._store is not None:
            try:
                self._store.persist_offers(offers, user_id)
            except StorageUnavailableError as e:
                logger.warning("Offer persistence failed for user %s: %s", user_id, e)
                warnings.append(f"Offers were not saved: {e}")

        return BatchResult(offers=offers, steps=steps, warnings=warnings)

    # ------------------------------------------------------------------
    # Per-file processing
    # ------------------------------------------------------------------

    def _process_file(
        self,
        file: UploadedFile,
        index: int,
        total: int,
        emit: ProgressObserver,
    ) -> List[ExtractedOffer]:
        def progress(fraction: float) -> float:
            return (index + fraction) / total * 100

        name = file.name
        logger.info("Processing %s (%d/%d, %d bytes)", name, index + 1, total, file.size)

        try:
            emit(ProcessingStep(f"📄 Reading {name}...", progress(STAGE_READ), name))
            text = self._read_text(file)

            if len(text.strip()) < MIN_TEXT_CHARS:
                logger.warning("Skipping %s: only %d usable characters", name, len(text.strip()))
                emit(ProcessingStep(
                    f"⚠️ {name}: content too short",
                    progress(STAGE_DONE), name, offers_found=0, level="warning",
                ))
                return []

            document = RawDocument(file_name=name, raw_text=text[:MAX_REQUEST_TEXT_CHARS])
            offers, used_fallback = self.extract_offers(
                document,
                on_stage=lambda message, fraction: emit(ProcessingStep(message, progress(fraction), name)),
            )

        except INPUT_ERRORS as e:
            logger.warning("Skipping %s: %s", name, e)
            emit(ProcessingStep(
                f"⚠️ {name} skipped: {e}", progress(STAGE_DONE), name, offers_found=0, level="warning",
            ))
            return []
        except CollaboratorUnavailableError as e:
            logger.warning("Model call failed for %s: %s", name, e)
            emit(ProcessingStep(
                f"❌ Error on {name}: {e}", progress(STAGE_DONE), name, offers_found=0, level="error",
            ))
            return []
        except Exception as e:
            logger.exception("Unexpected error while processing %s", name)
            emit(ProcessingStep(
                f"❌ Error on {name}: {e}", progress(STAGE_DONE), name, offers_found=0, level="error",
            ))
            return []

        tagged = [self._tag(offer, name) for offer in offers]

        if tagged:
            suffix = " (fallback extraction)" if used_fallback else ""
            emit(ProcessingStep(
                f"✅ {len(tagged)} offer(s) extracted from {name}{suffix}",
                progress(STAGE_DONE), name, offers_found=len(tagged),
                level="warning" if used_fallback else "info",
            ))
        else:
            emit(ProcessingStep(
                f"❌ No offer found in {name}", progress(STAGE_DONE), name, offers_found=0,
            ))
        return tagged

    def _read_text(self, file: UploadedFile) -> str:
        if file.size > self.max_file_size_mb * 1024 * 1024:
            raise FileTooLargeError(file.name, file.size, self.max_file_size_mb)
        return self._text_extractor(file) or ""

    def _tag(self, offer: ExtractedOffer, source_file: str) -> ExtractedOffer:
        tagged = ExtractedOffer(**offer)
        tagged["id"] = self._id_factory()
        tagged["sourceFile"] = source_file
        return tagged

    # ------------------------------------------------------------------
    # Single document extraction
    # ------------------------------------------------------------------

    def extract_offers(
        self,
        document: RawDocument,
        on_stage: Optional[Callable[[str, float], None]] = None,
    ) -> Tuple[List[ExtractedOffer], bool]:
        """
        Extract offers from one document's text.

        Returns (offers, used_fallback). Offers are normalized and never carry
        the unknown-supplier sentinel. Model unavailability propagates as
        CollaboratorUnavailableError; malformed output switches to the fallback.
        """
        stage = on_stage or (lambda message, fraction: None)
        name = document.file_name

        doc_class = classify(document.raw_text)
        logger.info("Detected document type for %s: %s", name, doc_class.value)
        stage(f"🔍 Analysing {name} ({doc_class.value})...", STAGE_ANALYSE)

        user_prompt = build_extraction_prompt(document.raw_text, name, doc_class)

        stage(f"🤖 AI extraction for {name}...", STAGE_MODEL)
        try:
            raw_output = self._completion.complete(EXTRACTION_SYSTEM_PROMPT, user_prompt, self.options)
            payload = parse_payload(raw_output)
        except MalformedResponseError as e:
            payload = Unparseable(str(e))

        if isinstance(payload, Unparseable):
            logger.warning("Unusable model output for %s (%s), using fallback extraction", name, payload.reason)
            return fallback_extract(document.raw_text, name), True

        candidates = payload_offers(payload)
        normalized = [normalize_offer(c) for c in candidates]
        offers = [o for o in normalized if not is_unknown_supplier(o)]

        logger.info(
            "%s: %d candidate(s), %d offer(s) kept after validation",
            name, len(candidates), len(offers),
        )
        return offers, False
