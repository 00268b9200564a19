from __future__ import annotations

import os
from typing import Iterator

import pytest

from tollgate.core.context.tenant import clear_tenant
from tollgate.core.context.user import clear_user_context


@pytest.fixture(autouse=True)
def clear_call_context() -> Iterator[None]:
    clear_user_context()
    clear_tenant()
    yield
    clear_user_context()
    clear_tenant()


@pytest.fixture(autouse=True)
def isolate_tollgate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [key for key in os.environ if key.startswith("TOLLGATE_")]:
        monkeypatch.delenv(name, raising=False)
