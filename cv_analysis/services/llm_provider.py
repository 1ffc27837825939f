"""
LLM provider for Gemini via the Google GenAI SDK.

Two credential shapes are accepted in GOOGLE_API_KEY:
- a Google AI Studio API key (Gemini Developer API)
- a service-account JSON blob, exchanged for OAuth credentials and routed
  through Vertex AI in the credential's project
"""
import json
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from google.oauth2 import service_account

from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import AIResponseError, AITransportError, ConfigurationError
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)

VERTEX_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


class LLMProvider:
    """
    Thin async wrapper around ``genai.Client``.

    One call per method, no retries. Transport failures surface as
    AITransportError and empty replies as AIResponseError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self._api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL
        self.temperature = settings.GEMINI_TEMPERATURE if temperature is None else temperature
        self.timeout = settings.AI_REQUEST_TIMEOUT if timeout is None else timeout
        self._client: Optional[genai.Client] = None

    @property
    def is_configured(self) -> bool:
        """Whether a credential is available at all"""
        return bool(self._api_key and self._api_key.strip())

    @property
    def uses_service_account(self) -> bool:
        return self.is_configured and self._api_key.strip().startswith("{")

    @property
    def client(self) -> genai.Client:
        """Get or create the GenAI client"""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _http_options(self) -> types.HttpOptions:
        # HttpOptions.timeout is in milliseconds
        return types.HttpOptions(timeout=int(self.timeout * 1000))

    def _create_client(self) -> genai.Client:
        if not self.is_configured:
            raise ConfigurationError("GOOGLE_API_KEY not configured")

        if self.uses_service_account:
            return self._create_vertex_client()

        logger.info(f"Initializing Gemini API client: {self.model_name}")
        return genai.Client(api_key=self._api_key.strip(), http_options=self._http_options())

    def _create_vertex_client(self) -> genai.Client:
        """Create a Vertex AI client from a service-account JSON credential"""
        info = _parse_service_account(self._api_key)

        project = info.get("project_id")
        if not project:
            raise ConfigurationError("Service account credential has no project_id")

        try:
            credentials = service_account.Credentials.from_service_account_info(info, scopes=VERTEX_SCOPES)
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"Invalid service account credential: {e}")

        logger.info(
            f"Initializing Vertex AI client: {self.model_name} "
            f"(project={project}, location={settings.VERTEX_LOCATION})"
        )
        return genai.Client(
            vertexai=True,
            project=project,
            location=settings.VERTEX_LOCATION,
            credentials=credentials,
            http_options=self._http_options(),
        )

    async def _generate(self, contents) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=types.GenerateContentConfig(temperature=self.temperature),
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e.code} - {e.message}")
            raise AITransportError(
                f"Google AI API error: {e.code} - {e.message}",
                details={"status": e.code}
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Gemini call failed: {e}")
            raise AITransportError(f"Google AI API request failed: {e}")

        text = response.text
        if not text or not text.strip():
            raise AIResponseError("Empty response from Google AI API")

        logger.debug(f"Gemini response length: {len(text)} chars")
        return text

    async def generate_text(self, prompt: str) -> str:
        """
        Generate a text reply for a single prompt

        Args:
            prompt: Full prompt text

        Returns:
            Raw model reply
        """
        return await self._generate(prompt)

    async def extract_document_text(self, data: bytes, mime_type: str, instruction: str) -> str:
        """
        Send a document inline with an instruction and return the reply text

        Args:
            data: Raw document bytes (base64-encoded on the wire by the SDK)
            mime_type: Document MIME type
            instruction: What to do with the document

        Returns:
            Raw model reply
        """
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=instruction),
                    types.Part.from_bytes(data=data, mime_type=mime_type),
                ],
            )
        ]
        return await self._generate(contents)


def _parse_service_account(raw: str) -> dict:
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"GOOGLE_API_KEY looks like JSON but does not parse: {e}")
    if not isinstance(info, dict):
        raise ConfigurationError("Service account credential must be a JSON object")
    return info


# Singleton instance
_llm_provider: Optional[LLMProvider] = None


def get_llm_provider() -> LLMProvider:
    """Get or create singleton LLM provider instance"""
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = LLMProvider()
    return _llm_provider


def reset_llm_provider():
    """Reset the singleton (useful for testing or config changes)"""
    global _llm_provider
    _llm_provider = None
