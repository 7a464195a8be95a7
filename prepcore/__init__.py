"""
Interview-prep core: document chunking and embedding, resume retrieval,
question generation and batched answer evaluation.
"""

from .config import Settings, configure_logging
from .controller import InterviewPrepController
from .services.answer_critic import evaluate_all
from .services.chunker import chunk_text
from .services.embeddings import EmbeddingClient
from .services.question_generator import generate_questions
from .services.retriever import cosine_similarity, find_similar_chunks
from .services.scoring import calculate_final_scores

__all__ = [
    "EmbeddingClient",
    "InterviewPrepController",
    "Settings",
    "calculate_final_scores",
    "chunk_text",
    "configure_logging",
    "cosine_similarity",
    "evaluate_all",
    "find_similar_chunks",
    "generate_questions",
]
