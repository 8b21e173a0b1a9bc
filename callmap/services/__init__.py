from .corpus_loader import load_corpus

__all__ = ["load_corpus"]
