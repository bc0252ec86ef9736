from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from core.db import engine
from services.vault_registry import VaultRegistry, registry


def get_db() -> Generator:
    with Session(engine) as session:
        yield session


def get_registry() -> VaultRegistry:
    return registry


SessionDep = Annotated[Session, Depends(get_db)]
RegistryDep = Annotated[VaultRegistry, Depends(get_registry)]
