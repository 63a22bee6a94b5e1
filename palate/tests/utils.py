"""Shared helpers for API and service tests."""

from __future__ import annotations

import uuid
import zlib
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np
from httpx import AsyncClient

from palate.core.config import settings
from palate.embedding.client import BaseEmbeddingClient, EmbeddingError
from palate.models.dish import Dish, EmbeddingStatus
from palate.models.restaurant import Restaurant
from palate.models.user import User
from palate.services.vector_index import Neighbor, SearchFilters, VectorIndex


@dataclass(slots=True)
class AuthContext:
    """Authenticated client context for API tests."""

    client: AsyncClient
    user: dict[str, Any]
    email: str
    password: str
    access_token: str

    @property
    def user_id(self) -> str:
        return str(self.user["id"])

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


async def register_and_login(client: AsyncClient, *, prefix: str = "user") -> AuthContext:
    """Register and log in a new user, returning the auth context."""
    suffix = uuid.uuid4().hex[:8]
    email = f"{prefix}_{suffix}@example.com"
    password = "supersecret123"
    creds = {"email": email, "password": password, "display_name": f"{prefix.title()} {suffix}"}

    register_res = await client.post("/api/auth/register", json=creds)
    assert register_res.status_code == 201
    user = register_res.json()["user"]

    login_res = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert login_res.status_code == 200

    return AuthContext(
        client=client,
        user=user,
        email=email,
        password=password,
        access_token=login_res.json()["access_token"],
    )


def basis_vector(index: int, *, weight: float = 1.0, dimension: int | None = None) -> list[float]:
    vector = [0.0] * (dimension or settings.embedding_dimension)
    vector[index] = weight
    return vector


def blend(*parts: Sequence[float]) -> list[float]:
    return np.sum(np.asarray(parts, dtype=float), axis=0).tolist()


class FakeEmbeddingClient(BaseEmbeddingClient):
    """Deterministic embeddings keyed by text; unknown text gets a seeded random vector."""

    provider = "fake"
    model = "fake-embedding"

    def __init__(
        self,
        vectors: Mapping[str, Sequence[float]] | None = None,
        *,
        dimension: int | None = None,
        error: EmbeddingError | None = None,
    ) -> None:
        self.dimension = dimension or settings.embedding_dimension
        self.vectors = dict(vectors or {})
        self.error = error
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error:
            raise self.error
        if text in self.vectors:
            return self.check_dimension(list(self.vectors[text]))
        rng = np.random.default_rng(zlib.crc32(text.encode("utf-8")))
        return self.check_dimension(rng.normal(size=self.dimension).tolist())


class FakeVectorIndex(VectorIndex):
    """Returns canned neighbours and records what it was asked for."""

    def __init__(self, neighbors: Sequence[Neighbor]) -> None:
        self.neighbors = list(neighbors)
        self.requested_limits: list[int] = []

    async def search(self, vector, limit, filters: SearchFilters | None = None) -> list[Neighbor]:
        self.requested_limits.append(limit)
        return self.neighbors[:limit]


async def make_user(session, *, email: str | None = None, taste_profile: dict | None = None) -> User:
    user = User(
        email=email or f"diner_{uuid.uuid4().hex[:8]}@example.com",
        hashed_password="secret",
        taste_profile=taste_profile,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_restaurant(session, owner: User, *, name: str = "Test Kitchen") -> Restaurant:
    restaurant = Restaurant(
        owner_id=owner.id,
        name=name,
        description="",
        address="1 Test Street",
        latitude=51.5,
        longitude=-0.12,
    )
    session.add(restaurant)
    await session.commit()
    await session.refresh(restaurant)
    return restaurant


async def make_dish(
    session,
    restaurant: Restaurant,
    name: str,
    *,
    embedding: list[float] | None = None,
    description: str | None = None,
    category: str | None = None,
    price: float | None = None,
    is_available: bool = True,
    status: EmbeddingStatus | None = None,
) -> Dish:
    dish = Dish(
        restaurant_id=restaurant.id,
        name=name,
        description=description,
        category=category,
        price=price,
        is_available=is_available,
        embedding=embedding,
        embedding_status=status or (EmbeddingStatus.READY if embedding else EmbeddingStatus.PENDING),
    )
    session.add(dish)
    await session.commit()
    await session.refresh(dish)
    return dish
