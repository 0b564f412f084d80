from pydantic import BaseModel
from typing import Optional, Dict, Any, Literal


class QueryFilter(BaseModel):
    query_filter: Optional[str] = None
    parameters: Dict[str, Any] = {}

    def add_filter(self, filter: str, param: Dict[str, Any] = {}, operator: Literal['and', 'or'] = 'and'):
        """
        Examples:
            >>> add_filter(f"PartitionKey eq @PartitionKey", {"PartitionKey": "product"})
            >>> add_filter(f"title eq @title", {"title": "Sunset"})
        """
        def query_filter_append(val: str):
            if self.query_filter:
                self.query_filter += f" {operator} {val}"
            else:
                self.query_filter = val

        if not param:
            query_filter_append(filter)
            return

        first_key, first_value = next(iter(param.items()))
        if first_value is not None:
            query_filter_append(filter)
            self.parameters.update(param)

    def is_query(self):
        return True if self.query_filter is not None else False
