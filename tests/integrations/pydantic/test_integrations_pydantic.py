"""Tests for building Pydantic models."""

import pydantic.dataclasses as pdc
import pytest
from pydantic import BaseModel, ConfigDict, Field

from servicewire.container import ServiceContainer
from servicewire.providers import ServiceProvider


class DepService:
    pass


class DepServiceProvider(ServiceProvider[DepService]):
    def get_service_id(self) -> str:
        return "dep_service"

    def get_service_type(self) -> type[DepService]:
        return DepService

    def get_service(self) -> DepService:
        return DepService()


class PydanticModelWithDep(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    dep: DepService


class PydanticModelWithDefault(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    dep: DepService
    name: str = "default"
    retries: int = Field(default=3, ge=0)


class EmptyPydanticModel(BaseModel):
    pass


@pdc.dataclass(config=ConfigDict(arbitrary_types_allowed=True))
class PydanticDataclassWithDep:
    dep: DepService


@pytest.fixture()
def dep_container(container: ServiceContainer) -> ServiceContainer:
    return container.add(DepServiceProvider)


class TestPydanticBuild:
    def test_build_model_with_dependency(self, dep_container: ServiceContainer) -> None:
        """Model fields are autowired from aliased services."""
        result = dep_container.build(PydanticModelWithDep)

        assert isinstance(result, PydanticModelWithDep)
        assert result.dep is dep_container.get("dep_service")

    def test_build_model_with_defaults(self, dep_container: ServiceContainer) -> None:
        result = dep_container.build(PydanticModelWithDefault)

        assert result.name == "default"
        assert result.retries == 3

    def test_build_empty_model(self, container: ServiceContainer) -> None:
        assert isinstance(container.build(EmptyPydanticModel), EmptyPydanticModel)

    def test_build_pydantic_dataclass(self, dep_container: ServiceContainer) -> None:
        result = dep_container.build(PydanticDataclassWithDep)

        assert isinstance(result.dep, DepService)

    def test_model_as_explicit_argument(self, dep_container: ServiceContainer) -> None:
        class Handler:
            def __init__(self, model: PydanticModelWithDep, dep: DepService) -> None:
                self.model = model
                self.dep = dep

        model = dep_container.build(PydanticModelWithDep)

        handler = dep_container.build(Handler, model)

        assert handler.model is model
        assert handler.dep is model.dep

    def test_model_served_by_provider(self, dep_container: ServiceContainer) -> None:
        class ModelProvider(ServiceProvider[PydanticModelWithDep]):
            def get_service_id(self) -> str:
                return "model"

            def get_service_type(self) -> type[PydanticModelWithDep]:
                return PydanticModelWithDep

            def get_service(self) -> PydanticModelWithDep:
                return self.service_container.build(PydanticModelWithDep)

        dep_container.add(ModelProvider)

        assert dep_container.get_by_alias(PydanticModelWithDep).dep is dep_container.get(
            "dep_service",
        )
