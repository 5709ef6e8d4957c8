from __future__ import annotations

import numpy as np
import torch
from transformers import AutoModel, AutoTokenizer

from turtlegraph.embeddings.encoder import EmbeddingEncoder


class HuggingFaceEmbeddingEncoder(EmbeddingEncoder):
    """
    HuggingFace sentence encoder with mask-aware mean pooling.

    Requires the ``hf`` extra (torch, transformers).
    """

    def __init__(
        self,
        *,
        model_name: str,
        device: str = "cpu",
        normalize: bool = True,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self.normalize = normalize

        tokenizer = AutoTokenizer.from_pretrained(model_name)
        model = AutoModel.from_pretrained(model_name)

        model.to(device)
        model.eval()

        self.tokenizer = tokenizer
        self.model = model

        # Infer embedding dimension from the model config when present
        hidden_size = getattr(getattr(model, "config", None), "hidden_size", None)
        if hidden_size is None:
            with torch.no_grad():
                probe = tokenizer("probe", return_tensors="pt").to(device)
                hidden_size = model(**probe).last_hidden_state.shape[-1]

        super().__init__(dimension=int(hidden_size))

    def _encode_one(self, text: str) -> np.ndarray:
        with torch.no_grad():
            inputs = self.tokenizer(
                text,
                return_tensors="pt",
                truncation=True,
                padding=True,
            ).to(self.device)

            token_embeddings = self.model(**inputs).last_hidden_state
            mask = inputs["attention_mask"].unsqueeze(-1).expand(token_embeddings.size())
            summed = (token_embeddings * mask).sum(dim=1)
            counts = mask.sum(dim=1).clamp(min=1e-9)

        vec = (summed / counts).squeeze(0).cpu().numpy()

        if self.normalize:
            norm = np.linalg.norm(vec)
            if norm > 0:
                vec = vec / norm

        return vec
