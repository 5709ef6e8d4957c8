DEFAULTS = {
    # Call the embedding provider when nodes are created through the factory
    "EMBED_ON_CREATE": True,
    # propagate | skip
    "EMBEDDING_FAILURE_POLICY": "propagate",
    # none | hashing | huggingface
    "EMBEDDING_BACKEND": "none",
    # HuggingFace model used by the huggingface backend
    "EMBEDDING_MODEL": "sentence-transformers/all-MiniLM-L6-v2",
    # Torch device for the huggingface backend
    "EMBEDDING_DEVICE": "cpu",
    # Vector size of the hashing backend
    "EMBEDDING_DIMENSION": 384,
    # L2-normalize produced vectors
    "EMBEDDING_NORMALIZE": True,
    # Minimum cosine similarity for an embedding soft link
    "SOFT_LINK_THRESHOLD": 0.9,
}
