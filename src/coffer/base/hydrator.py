from inspect import Parameter
from typing import Any, Callable, Dict, List, Type, Union

Row = Dict[str, Any]


class Hydrator:
    """Turns raw rows into models

    Subclass it and override `hydrate` to reshape rows before they reach
    the model.
    """

    fallback: Type[object] = dict
    """Model used when `hydrate` is called without one"""

    scalars = (str, int, float, bool)

    def _make(
        self, model: Type[object]
    ) -> Callable[[Union[Row, List[Row]]], Any]:
        def factory(data: Union[Row, List[Row]]):
            if isinstance(data, list):
                return [self.hydrate(row, model) for row in data]
            return self.hydrate(data, model)

        return factory

    def hydrate(self, data: Row, model: Type[object] = Parameter.empty):
        """Cast one row

        Args:
            data (Dict[str, Any]): Column name to value
            model (Type[object], optional): Called with the columns as
                keyword arguments. A scalar type receives the first column
                instead. Defaults to `fallback`.

        Returns:
            Any: The row cast into the model
        """
        if model is Parameter.empty:
            model = self.fallback
        if model is dict:
            return dict(data)
        if model in self.scalars:
            value, *_ = data.values()
            return model(value)
        return model(**data)
