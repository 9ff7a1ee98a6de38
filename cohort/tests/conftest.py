"""
Pytest fixtures shared across the Cohort test suite
"""

import re
import zlib

import numpy as np
import pytest


SAMPLE_CORPUS = """Some preamble text that is not part of any section
--- START OF FILE: 2025_may ---
Student Name,Student Age,School Name,City,Track Chosen,Course 1,Instructor 1,Course 2,Instructor 2,Teaching Assistant,RC Name,T-shirt Size,Favourite Colour
Aarav Shah,14,TVS Academy Hosur,Hosur,Explorers,Robotics,Dr. Rao,Astronomy,Ms. Iyer,Kiran,Meera,M,Blue
"Diya Nair",13,"Greenwood High, Bannerghatta",Bangalore,Wizards,Creative Writing,Mr. Das,Robotics,Dr. Rao,Kiran,Meera,S,Red

,15,TVS Academy Hosur,Hosur,Explorers,Robotics,Dr. Rao,,,,,L,Green
Rohan Mehta,15,TVS Academy Hosur
--- END OF FILE: 2025_may ---
--- START OF FILE: 2024_june ---
Student Name,School Name,City,Track Chosen,Course 1,Instructor 1,RC Name
Isha Reddy,Delhi Public School,Hyderabad,Explorers,Biology,Dr. Sen,Arjun
--- END OF FILE: 2024_june ---
"""


class HashingEmbeddingClient:
    """
    Deterministic stand-in for a fastembed model: bag-of-words counts
    hashed into a fixed number of dimensions.
    """

    def __init__(self, dim: int = 1024):
        self.dim = dim
        self.calls = 0

    def embed(self, texts):
        self.calls += 1
        for text in texts:
            vec = np.zeros(self.dim)
            for token in re.findall(r"[a-z0-9]+", text.lower()):
                vec[zlib.crc32(token.encode()) % self.dim] += 1.0
            yield vec


@pytest.fixture
def sample_corpus() -> str:
    return SAMPLE_CORPUS


@pytest.fixture
def record_store(sample_corpus):
    from cohort.ingest.record_store import RecordStore
    return RecordStore.from_text(sample_corpus)


@pytest.fixture
def embedding_client():
    return HashingEmbeddingClient()


@pytest.fixture
def embedding_service(embedding_client):
    from cohort.common.embedding_service import EmbeddingService
    return EmbeddingService(mode="femb", model="test-hashing", client=embedding_client)


@pytest.fixture
def vector_store():
    from cohort.common.vector_store import InMemoryVectorStore
    return InMemoryVectorStore()
