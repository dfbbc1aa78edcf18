"""Text-generation client for collection reminder messages"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
import httpx
from fiado_ledger.config import settings
from fiado_ledger.domain.exceptions import ReminderGenerationError
from fiado_ledger.infrastructure.observability.metrics import reminder_fallback_counter, reminder_latency_histogram

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Você é um assistente de cobrança amigável para um pequeno comerciante brasileiro.
O cliente se chama {name} e deve um total de R$ {amount}.
As últimas dívidas são: {debts}.

Escreva uma mensagem de WhatsApp educada, profissional e empática lembrando o cliente da pendência.
Não seja agressivo. Use um tom de parceria.
A mensagem deve ser curta e direta.
Inclua emojis de forma moderada.
"""


def build_prompt(customer_name: str, amount: Decimal, debts: Sequence[Tuple[Optional[str], Decimal]]) -> str:
    """Render the reminder prompt; only the three most recent debts are listed"""
    listed = ", ".join(f"{description or 'Sem descrição'} (R$ {value:.2f})" for description, value in debts[:3])
    return PROMPT_TEMPLATE.format(name=customer_name, amount=f"{amount:.2f}", debts=listed or "nenhuma")


class ReminderClient:
    """Client for the Gemini generateContent API"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        fallback_message: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.gemini_api_base).rstrip("/")
        self.model = model or settings.gemini_model
        self.timeout = timeout or settings.reminder_timeout_seconds
        self.fallback_message = fallback_message or settings.reminder_fallback_message
        self.transport = transport

    async def generate_message(
        self,
        customer_name: str,
        amount: Decimal,
        debts: Sequence[Tuple[Optional[str], Decimal]],
    ) -> Tuple[str, bool]:
        """
        Produce a reminder for a customer's outstanding balance.

        Never raises: any failure or timeout yields the fallback message.

        Returns:
            (message, generated) where generated is False for the fallback
        """
        if not self.api_key:
            reminder_fallback_counter.labels(reason="disabled").inc()
            return self.fallback_message, False

        prompt = build_prompt(customer_name, amount, debts)
        try:
            with reminder_latency_histogram.time():
                text = await self._generate(prompt)
            return text, True

        except httpx.TimeoutException:
            reason = "timeout"
            logger.warning(f"Reminder generation timed out after {self.timeout}s")
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            reason = "http_error"
            logger.warning(f"Reminder generation failed: {e}")
        except ReminderGenerationError as e:
            reason = "bad_response"
            logger.warning(f"Reminder generation returned no text: {e}")

        reminder_fallback_counter.labels(reason=reason).inc()
        return self.fallback_message, False

    async def _generate(self, prompt: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/v1beta/models/{self.model}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
            )
            response.raise_for_status()

            try:
                data = response.json()
                parts: List[dict] = data["candidates"][0]["content"]["parts"]
                text = "".join(part.get("text") or "" for part in parts if isinstance(part, dict)).strip()
            except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
                raise ReminderGenerationError(f"Unexpected response shape: {e}") from e

            if not text:
                raise ReminderGenerationError("Empty text in response")
            return text
