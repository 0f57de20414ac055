"""Builds the endpoint model from the accepted interface methods."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Set

from ..gotypes import element_type, is_error, qualify
from ..models import EndpointModel, MessagePair, Method, NamedTypeValue, Struct
from ..naming import snake_case, unique_name, upper_first


class ModelBuilder:
    """Derives ``<M>Req``/``<M>Res`` shapes and the endpoint ``Set``.

    Request fields are indexed ``0..N-1`` over the non-context parameters and
    response fields ``1..M`` over the results; schema field numbers are derived
    from these indices.
    """

    def __init__(self, context_type: str = "context.Context") -> None:
        self.context_type = context_type

    def build(
        self,
        service_name: str,
        interface_name: str,
        methods: Sequence[Method],
        *,
        package: Optional[str] = None,
    ) -> EndpointModel:
        """``package`` qualifies service-local types used from the endpoint package."""
        pairs = [self._pair(self.normalize(method), package) for method in methods]
        set_struct = Struct(
            name="Set",
            fields=[
                NamedTypeValue(name=f"{pair.name}Endpoint", type="endpoint.Endpoint")
                for pair in pairs
            ],
            comment="Set collects all of the endpoints that compose the service.",
        )
        return EndpointModel(
            service_name=service_name, interface_name=interface_name, set=set_struct, pairs=pairs
        )

    def normalize(self, method: Method) -> Method:
        """Name every parameter and result so generated code can refer to them."""
        taken: Set[str] = {p.name for p in method.parameters + method.results if p.name}
        parameters: List[NamedTypeValue] = []
        for index, param in enumerate(method.parameters):
            if param.name and param.name != "_":
                parameters.append(param)
                continue
            base = "ctx" if param.type == self.context_type else f"arg{index}"
            parameters.append(replace(param, name=unique_name(base, taken)))
        results: List[NamedTypeValue] = []
        for index, result in enumerate(method.results):
            if result.name and result.name != "_":
                results.append(result)
                continue
            base = "err" if is_error(result.type) else f"res{index}"
            results.append(replace(result, name=unique_name(base, taken)))
        return replace(method, parameters=parameters, results=results)

    def is_context(self, param: NamedTypeValue) -> bool:
        return param.type == self.context_type

    def _pair(self, method: Method, package: Optional[str]) -> MessagePair:
        params = [p for p in method.parameters if not self.is_context(p)]
        request = Struct(
            name=f"{method.name}Req",
            fields=[
                self._field(param, index, package) for index, param in enumerate(params)
            ],
        )
        response = Struct(
            name=f"{method.name}Res",
            fields=[
                self._field(result, index + 1, package)
                for index, result in enumerate(method.results)
            ],
        )
        return MessagePair(method=method, params=params, request=request, response=response)

    @staticmethod
    def _field(source: NamedTypeValue, index: int, package: Optional[str]) -> NamedTypeValue:
        kind = element_type(source.type)
        if package:
            kind = qualify(kind, package)
        return NamedTypeValue(
            name=upper_first(source.name),
            type=kind,
            tag=f'`json:"{snake_case(source.name)}"`',
            index=index,
        )


__all__ = ["ModelBuilder"]
