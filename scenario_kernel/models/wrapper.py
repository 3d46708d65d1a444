"""Persisted layout of a StochasticWrapper."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from scenario_kernel.models.mapping import DataMappingRecord


class WrapperGroup(BaseModel):
    """
    Serialized StochasticWrapper.

    - Block: the nested inner target group. Optional; when absent, the inner
      target has to be supplied by other means before apply is useful.
    - NumberDataMappings / DataMappings: the mapping records, resolved
      against the inner target on load.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str = "StochasticWrapper"
    block: Optional[dict] = Field(default=None, alias="Block")
    number_data_mappings: int = Field(default=0, ge=0, alias="NumberDataMappings")
    data_mappings: List[DataMappingRecord] = Field(default=[], alias="DataMappings")
