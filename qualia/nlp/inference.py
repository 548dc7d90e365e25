"""Inference backends that turn token sequences into 5-way class scores."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

import httpx

# Optional heavy imports for the local model backend
try:
    import torch
    from transformers import AutoModelForSequenceClassification
except Exception:  # pragma: no cover - optional dependency
    torch = None
    AutoModelForSequenceClassification = None

from qualia.nlp.tokenizer import TokenSequence

logger = logging.getLogger("qualia.inference")

NUM_LABELS = 5
LABELS = tuple(f"LABEL_{index}" for index in range(NUM_LABELS))


@runtime_checkable
class InferenceAdapter(Protocol):
    """Opaque classifier boundary: token sequence in, label scores out."""

    async def predict(self, tokens: TokenSequence) -> Mapping[str, float]:
        """Return raw (possibly unnormalised) scores keyed ``LABEL_0``..``LABEL_4``."""
        raise NotImplementedError


class TorchInferenceAdapter:
    """Runs a local transformers sequence-classification model."""

    def __init__(self, model_path: str | Path, *, device: str = "auto") -> None:
        if torch is None or AutoModelForSequenceClassification is None:
            raise RuntimeError("torch and transformers are required for the local BERT backend.")
        self._model_path = Path(model_path)
        self._device = self._select_device(device)
        model = AutoModelForSequenceClassification.from_pretrained(str(self._model_path))
        model.to(self._device)
        model.eval()
        num_labels = int(getattr(model.config, "num_labels", NUM_LABELS))
        if num_labels != NUM_LABELS:
            raise ValueError(f"Expected a {NUM_LABELS}-class model, got {num_labels} labels.")
        self._model = model
        logger.info("Loaded sentiment model from %s on %s.", self._model_path, self._device)

    @staticmethod
    def _select_device(preference: str) -> Any:
        pref = (preference or "auto").lower()
        if pref == "cuda" and torch.cuda.is_available():
            return torch.device("cuda")
        if pref == "auto" and torch.cuda.is_available():
            return torch.device("cuda")
        return torch.device("cpu")

    async def predict(self, tokens: TokenSequence) -> Mapping[str, float]:
        return await asyncio.to_thread(self._forward, tokens)

    def _forward(self, tokens: TokenSequence) -> dict[str, float]:
        def as_tensor(values: Sequence[int]) -> Any:
            return torch.tensor([list(values)], dtype=torch.long, device=self._device)

        with torch.no_grad():
            output = self._model(
                input_ids=as_tensor(tokens.input_ids),
                attention_mask=as_tensor(tokens.attention_mask),
                token_type_ids=as_tensor(tokens.token_type_ids),
            )
        logits = output.logits[0].detach().cpu().tolist()
        return {label: float(value) for label, value in zip(LABELS, logits)}


class HttpInferenceAdapter:
    """Posts token sequences to a remote inference server."""

    RETRYABLE_STATUS = {408, 425, 429, 500, 502, 503, 504}

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 5.0,
        max_retries: int = 1,
        client: Any | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("HTTP inference backend requires an endpoint URL.")
        self._endpoint = endpoint.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._max_retries = max(0, int(max_retries))
        self._base_backoff = 0.2

    async def predict(self, tokens: TokenSequence) -> Mapping[str, float]:
        payload = {
            "input_ids": list(tokens.input_ids),
            "attention_mask": list(tokens.attention_mask),
            "token_type_ids": tokens.token_type_ids,
        }
        attempt = 0
        backoff = self._base_backoff
        while True:
            try:
                response = await self._client.post(self._endpoint, json=payload)
                response.raise_for_status()
                return self._extract_scores(response.json())
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                retryable = status_code in self.RETRYABLE_STATUS
                logger.warning(
                    "Inference server returned %s (retryable=%s attempt=%s/%s)",
                    status_code,
                    retryable,
                    attempt + 1,
                    self._max_retries + 1,
                )
                if not retryable or attempt >= self._max_retries:
                    raise
            except httpx.RequestError as exc:
                logger.warning(
                    "Inference request error (attempt %s/%s): %s",
                    attempt + 1,
                    self._max_retries + 1,
                    exc,
                )
                if attempt >= self._max_retries:
                    raise
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, 2.0)
            attempt += 1

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _extract_scores(data: Any) -> dict[str, float]:
        if isinstance(data, dict):
            for key in ("classLabel_probs", "probs", "scores"):
                nested = data.get(key)
                if isinstance(nested, dict):
                    data = nested
                    break
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected inference payload: {data!r}")
        return {label: float(data[label]) for label in LABELS if label in data}


class StaticInferenceAdapter:
    """Test double that returns a fixed score mapping and records inputs."""

    def __init__(self, scores: Mapping[str, float] | Sequence[float]) -> None:
        if isinstance(scores, Mapping):
            self.scores = dict(scores)
        else:
            self.scores = {label: float(value) for label, value in zip(LABELS, scores)}
        self.calls: list[TokenSequence] = []

    async def predict(self, tokens: TokenSequence) -> Mapping[str, float]:
        self.calls.append(tokens)
        return dict(self.scores)


__all__ = [
    "InferenceAdapter",
    "TorchInferenceAdapter",
    "HttpInferenceAdapter",
    "StaticInferenceAdapter",
    "LABELS",
    "NUM_LABELS",
]
