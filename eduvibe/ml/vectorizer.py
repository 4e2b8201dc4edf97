# eduvibe/ml/vectorizer.py
"""
Text Vectorization Module
Turns free text (learning goals, mentor bios) into TF-IDF vectors for similarity
"""

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity
from typing import List


class TextVectorizer:
    """
    Vectorizes short free-text documents using TF-IDF.
    Fitted per scoring call on the documents being compared.
    """

    def __init__(self):
        """Initialize TF-IDF vectorizer with parameters suited to short profiles"""
        self.vectorizer = TfidfVectorizer(
            max_features=500,           # Limit vocabulary size
            ngram_range=(1, 2),         # Use unigrams and bigrams
            stop_words='english',       # Remove common English words
            min_df=1,
            max_df=1.0,                 # Tiny corpora: a shared term is the signal, keep it
            lowercase=True,
            strip_accents='unicode',
            sublinear_tf=True,
        )
        self.is_fitted = False

    def fit(self, documents: List[str]):
        """
        Fit the vectorizer on documents.

        Raises:
            ValueError: If there are no documents or no usable terms
        """
        if not documents:
            raise ValueError("Cannot fit on empty documents")

        self.vectorizer.fit(self._clean_documents(documents))
        self.is_fitted = True

    def transform(self, documents: List[str]) -> np.ndarray:
        """
        Transform documents to TF-IDF vectors.

        Returns:
            numpy array of TF-IDF vectors (n_samples, n_features)

        Raises:
            ValueError: If vectorizer not fitted
        """
        if not self.is_fitted:
            raise ValueError("Vectorizer must be fitted before transform. Call fit() first.")

        if not documents:
            return np.array([])

        return self.vectorizer.transform(self._clean_documents(documents)).toarray()

    def fit_transform(self, documents: List[str]) -> np.ndarray:
        self.fit(documents)
        return self.transform(documents)

    def compute_similarity(
        self,
        query_vectors: np.ndarray,
        document_vectors: np.ndarray
    ) -> np.ndarray:
        """
        Compute cosine similarity between query and document vectors.

        Returns:
            Similarity matrix (n_queries, n_documents) with values in [0, 1]
        """
        if query_vectors.size == 0 or document_vectors.size == 0:
            return np.array([])

        similarities = cosine_similarity(query_vectors, document_vectors)

        # Clip to [0, 1] range (cosine similarity can be [-1, 1])
        return np.clip(similarities, 0, 1)

    def _clean_documents(self, documents: List[str]) -> List[str]:
        """Collapse whitespace; None and non-strings become empty documents."""
        cleaned = []
        for doc in documents:
            if doc is None or not isinstance(doc, str):
                cleaned.append("")
            else:
                cleaned.append(" ".join(doc.split()))
        return cleaned

    def get_vocabulary_size(self) -> int:
        if not self.is_fitted:
            return 0

        return len(self.vectorizer.vocabulary_)


def text_similarities(query: str, documents: List[str]) -> List[float]:
    """
    Cosine similarity of ``query`` against each document, fitted on all of them.

    Returns zeros when the query is blank or nothing survives stop-word removal.
    """
    if not documents:
        return []
    if not query or not query.strip():
        return [0.0] * len(documents)

    vectorizer = TextVectorizer()
    try:
        vectors = vectorizer.fit_transform([query] + list(documents))
    except ValueError:
        # Empty vocabulary after stop-word removal
        return [0.0] * len(documents)

    similarities = vectorizer.compute_similarity(vectors[:1], vectors[1:])
    return [float(value) for value in similarities[0]]
