"""
Gemini service for legal summarization and the legal chat assistant

Each consumer (scan summarizer, chat assistant) is bound to its own API key
and keeps its own active-model cache. The active model is found by probing a
priority-ordered list of candidates and is re-probed once when it starts
failing with a not-found or quota error.
"""

import asyncio
from functools import partial
from typing import Any, Dict, List, Optional, Sequence, Tuple

import google.generativeai as genai
from google.ai import generativelanguage as glm
from google.api_core import exceptions as google_exceptions
from loguru import logger

from ..config import settings
from ..exceptions import ErrorKind, GenerationError, SummarizationError, TRANSIENT_KINDS
from ..models.requests import ChatTurn
from ..models.schemas import SummaryResult


LEGAL_SUMMARY_PROMPT = """Analyze this legal document and generate a clear, structured bullet point summary.
Highlight the following:
- **Key Clauses**: Important terms and conditions
- **Obligations**: What each party must do
- **Risks**: Potential legal risks or red flags
- **Important Dates**: Deadlines, effective dates, expiry dates
- **Penalties**: Any fines, consequences for breach
- **Rights**: Rights granted to each party

Use simple language that a layperson can understand. Format as clean bullet points (•).
Keep each bullet point to 1-2 sentences. If the document is not legal, still summarize it clearly.

DOCUMENT TEXT:
"""

LEGAL_CHAT_SYSTEM_PROMPT = """You are a professional legal assistant specialized in Indian law.
You must only answer questions related to:
- Law
- Legal rights
- Court procedures
- Consumer rights
- Contracts
- Legal documentation
- Criminal law
- Civil law
- Government legal policies

If a user asks anything unrelated to law, respond strictly with:
'I am designed to answer legal-related questions only.'

Do not answer non-legal topics under any circumstances."""

PROBE_PROMPT = "Hi"
TRUNCATION_MARKER = "\n\n[Document truncated due to length...]"


def build_summary_prompt(text: str, max_chars: int) -> str:
    """Prepend the summarization preamble, truncating very long documents"""
    if len(text) > max_chars:
        text = text[:max_chars] + TRUNCATION_MARKER
    return LEGAL_SUMMARY_PROMPT + text


class ModelCache:
    """Holds the identifier of the model currently assumed to work"""

    def __init__(self, model_name: Optional[str] = None):
        self._model_name = model_name

    def get(self) -> Optional[str]:
        return self._model_name

    def set(self, model_name: str) -> None:
        self._model_name = model_name

    def invalidate(self) -> None:
        self._model_name = None


def classify_gemini_error(error: Exception) -> ErrorKind:
    """Map a Gemini client exception to an ErrorKind"""
    if isinstance(error, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return ErrorKind.INVALID_CREDENTIAL
    if isinstance(error, google_exceptions.ResourceExhausted):
        return ErrorKind.QUOTA_EXCEEDED
    if isinstance(error, google_exceptions.NotFound):
        return ErrorKind.MODEL_NOT_FOUND

    message = str(error)
    lowered = message.lower()
    if "api key" in lowered or "api_key_invalid" in lowered:
        return ErrorKind.INVALID_CREDENTIAL
    if "429" in message or "quota" in lowered:
        return ErrorKind.QUOTA_EXCEEDED
    if "404" in message or "not found" in lowered:
        return ErrorKind.MODEL_NOT_FOUND
    if "safety" in lowered:
        return ErrorKind.CONTENT_POLICY
    return ErrorKind.UNKNOWN


class GeminiBackend:
    """Thin synchronous Gemini client bound to a single API key"""

    def __init__(self, api_key: str, temperature: float = 0.2):
        self.api_key = api_key
        self.temperature = temperature
        self._client: Optional[glm.GenerativeServiceClient] = None

    def _get_client(self) -> glm.GenerativeServiceClient:
        # One client per key, so scan and chat credentials never mix
        if self._client is None:
            self._client = glm.GenerativeServiceClient(client_options={"api_key": self.api_key})
        return self._client

    def generate(
        self,
        model_name: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        history: Sequence[Dict[str, str]] = (),
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Run one generateContent call and return the response text.

        Raises:
            GenerationError: classified failure of the call.
        """
        contents = [
            genai.protos.Content(role=turn["role"], parts=[genai.protos.Part(text=turn["text"])])
            for turn in history
        ]
        contents.append(genai.protos.Content(role="user", parts=[genai.protos.Part(text=prompt)]))

        generation_config = genai.protos.GenerationConfig(temperature=self.temperature)
        if max_output_tokens:
            generation_config.max_output_tokens = max_output_tokens

        request = genai.protos.GenerateContentRequest(
            model=f"models/{model_name}",
            contents=contents,
            generation_config=generation_config,
        )
        if system_instruction:
            request.system_instruction = genai.protos.Content(parts=[genai.protos.Part(text=system_instruction)])

        try:
            response = self._get_client().generate_content(request=request, timeout=timeout)
        except Exception as e:
            raise GenerationError(str(e), kind=classify_gemini_error(e)) from e

        return self._response_text(response)

    @staticmethod
    def _response_text(response: Any) -> str:
        if response.prompt_feedback and response.prompt_feedback.block_reason:
            reason = response.prompt_feedback.block_reason.name
            raise GenerationError(f"Prompt blocked by SAFETY filter ({reason})", kind=ErrorKind.CONTENT_POLICY)

        if not response.candidates:
            return ""

        candidate = response.candidates[0]
        if candidate.finish_reason == genai.protos.Candidate.FinishReason.SAFETY:
            raise GenerationError("Response blocked by SAFETY filter", kind=ErrorKind.CONTENT_POLICY)

        return "".join(part.text for part in candidate.content.parts)


class GeminiService:
    """Gemini consumer with model probing and single re-probe failover"""

    def __init__(
        self,
        name: str,
        api_key: Optional[str],
        model_candidates: Sequence[str],
        backend: Optional[GeminiBackend] = None,
        cache: Optional[ModelCache] = None,
        probe_timeout: float = 10.0,
        system_instruction: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
    ):
        self.name = name
        self.api_key = api_key
        self.model_candidates = list(model_candidates)
        self.backend = backend or (GeminiBackend(api_key) if api_key else None)
        self.cache = cache or ModelCache()
        self.probe_timeout = probe_timeout
        self.system_instruction = system_instruction
        self.max_output_tokens = max_output_tokens

    @property
    def active_model(self) -> Optional[str]:
        return self.cache.get()

    async def initialize(self):
        """Probe for a working model at startup"""
        if not self.api_key:
            logger.error(f"❌ {self.name} API key is not set, feature will not work.")
            return
        logger.info(f"✅ Found {self.name} API key: ***{self.api_key[-4:]}")
        try:
            model_name = await self.ensure_active_model()
            logger.info(f"✨ {self.name} active model: {model_name}")
        except GenerationError as e:
            logger.error(f"❌ {self.name} startup probe failed: {e.detail}")

    async def ensure_active_model(self) -> str:
        """Return the cached model, probing the candidates when there is none"""
        model_name = self.cache.get()
        if model_name:
            return model_name

        model_name = await self._probe_models()
        self.cache.set(model_name)
        return model_name

    async def _probe_models(self) -> str:
        logger.info(f"🔍 Probing available models for {self.name}...")
        failure_kinds: List[ErrorKind] = []

        for model_name in self.model_candidates:
            try:
                text = await asyncio.wait_for(
                    self._call(model_name, PROBE_PROMPT, timeout=self.probe_timeout, use_system_instruction=False),
                    timeout=self.probe_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"   ❌ {model_name} failed for {self.name}: Timeout after {self.probe_timeout:g}s")
                failure_kinds.append(ErrorKind.UNKNOWN)
                continue
            except GenerationError as e:
                short_error = e.detail.split("\n")[0][:120]
                logger.warning(f"   ❌ {model_name} failed for {self.name}: {short_error}")
                failure_kinds.append(e.kind)
                continue

            if text and text.strip():
                logger.info(f"   ✅ {model_name} is available and working for {self.name}!")
                return model_name
            logger.warning(f"   ❌ {model_name} returned an empty probe response for {self.name}")
            failure_kinds.append(ErrorKind.UNKNOWN)

        if failure_kinds and all(kind == ErrorKind.QUOTA_EXCEEDED for kind in failure_kinds):
            kind = ErrorKind.QUOTA_EXCEEDED
        else:
            kind = ErrorKind.INVALID_CREDENTIAL
        logger.error(f"❌ No working model found for {self.name}.")
        raise GenerationError(
            f"No Gemini model is available for {self.name}. Check your API key and quota.",
            kind=kind,
        )

    async def _call(
        self,
        model_name: str,
        prompt: str,
        history: Sequence[Dict[str, str]] = (),
        timeout: Optional[float] = None,
        use_system_instruction: bool = True,
    ) -> str:
        sync_generate = partial(
            self.backend.generate,
            model_name,
            prompt,
            system_instruction=self.system_instruction if use_system_instruction else None,
            history=history,
            max_output_tokens=self.max_output_tokens,
            timeout=timeout,
        )
        # Run the synchronous client in a thread pool
        return await asyncio.get_event_loop().run_in_executor(None, sync_generate)

    async def generate_with_failover(self, prompt: str, history: Sequence[Dict[str, str]] = ()) -> Tuple[str, str]:
        """
        Generate with the active model; on a transient failure re-probe once
        and retry the same request with the newly found model.

        Returns:
            (response text, model name)
        """
        model_name = await self.ensure_active_model()
        try:
            return await self._call(model_name, prompt, history=history), model_name
        except GenerationError as e:
            if e.kind not in TRANSIENT_KINDS:
                raise
            logger.warning(f"[Gemini] Model {model_name} failed for {self.name} ({e.kind.value}), re-probing...")
            self.cache.invalidate()

        model_name = await self.ensure_active_model()
        return await self._call(model_name, prompt, history=history), model_name


class LegalSummarizer(GeminiService):
    """Summarizes extracted document text into plain-language bullet points"""

    def __init__(self, api_key: Optional[str], model_candidates: Sequence[str], max_chars: int = 50_000,
                 min_chars: int = 10, **kwargs):
        super().__init__("SCAN_API_KEY", api_key, model_candidates, **kwargs)
        self.max_chars = max_chars
        self.min_chars = min_chars

    async def summarize(self, text: str) -> SummaryResult:
        """
        Summarize legal text.

        Raises:
            SummarizationError: credential missing, input too short, or no model usable.
        """
        if not self.api_key:
            raise SummarizationError("Gemini API key is not configured", kind=ErrorKind.INVALID_CREDENTIAL)
        if not text or len(text.strip()) < self.min_chars:
            raise SummarizationError("Extracted text is too short to summarize", kind=ErrorKind.UNREADABLE)

        prompt = build_summary_prompt(text, self.max_chars)
        logger.info(f"[Gemini] Sending {len(prompt) - len(LEGAL_SUMMARY_PROMPT)} chars for summarization...")

        try:
            summary, model_name = await self.generate_with_failover(prompt)
        except GenerationError as e:
            raise SummarizationError(f"Gemini summarization failed: {e.detail}", kind=e.kind) from e

        if not summary or not summary.strip():
            raise SummarizationError(f"Gemini summarization failed: {model_name} returned an empty summary")

        logger.info(f"[Gemini] Summary generated via {model_name} ({len(summary)} chars)")
        return SummaryResult(summary_text=summary, model_identifier=model_name)


class LegalChatAssistant(GeminiService):
    """Legal-only chat assistant with conversation history"""

    def __init__(self, api_key: Optional[str], model_candidates: Sequence[str], **kwargs):
        kwargs.setdefault("system_instruction", LEGAL_CHAT_SYSTEM_PROMPT)
        super().__init__("CHAT_API_KEY", api_key, model_candidates, **kwargs)

    @staticmethod
    def normalize_history(history: Sequence[ChatTurn]) -> List[Dict[str, str]]:
        """Keep user/model turns and drop leading model turns"""
        turns = [
            {"role": turn.role, "text": turn.content_text()}
            for turn in history
            if turn.role in ("user", "model")
        ]
        while turns and turns[0]["role"] == "model":
            turns.pop(0)
        return turns

    async def chat(self, message: str, history: Sequence[ChatTurn] = ()) -> Tuple[str, str]:
        """
        Answer a legal question.

        Returns:
            (reply, model name)
        """
        if not self.api_key:
            raise GenerationError("Gemini API key is not configured", kind=ErrorKind.INVALID_CREDENTIAL)

        reply, model_name = await self.generate_with_failover(message, history=self.normalize_history(history))
        logger.info(f"[Chat] Reply via {model_name}: {reply[:200]}{'...' if len(reply) > 200 else ''}")
        return reply, model_name


# Global Gemini consumers
scan_summarizer = LegalSummarizer(
    api_key=settings.scan_api_key,
    model_candidates=settings.gemini_model_candidates,
    max_chars=settings.summary_max_chars,
    min_chars=settings.min_readable_chars,
    probe_timeout=settings.model_probe_timeout_seconds,
)

chat_assistant = LegalChatAssistant(
    api_key=settings.chat_api_key,
    model_candidates=settings.gemini_model_candidates,
    probe_timeout=settings.model_probe_timeout_seconds,
    max_output_tokens=settings.chat_max_output_tokens,
)
