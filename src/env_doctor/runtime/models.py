"""
PHP runtime data models.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RuntimeFacts(BaseModel):
    """
    Snapshot of what the PHP runtime reported about itself.

    Fields stay None when the query failed; scoring treats that as
    undetectable rather than as an error.
    """

    binary: str = "php"
    version: Optional[str] = None
    sapi: Optional[str] = None
    extensions: List[str] = Field(default_factory=list)
    ini: Dict[str, str] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.version is not None

    def has_extension(self, name: str) -> bool:
        """Extension names are matched case-insensitively, like extension_loaded()."""
        wanted = name.lower()
        return any(ext.lower() == wanted for ext in self.extensions)

    def ini_value(self, key: str) -> Optional[str]:
        return self.ini.get(key)

    class Config:
        json_schema_extra = {
            "example": {
                "binary": "php",
                "version": "8.3.6",
                "sapi": "cli",
                "extensions": ["Core", "curl", "gd", "mbstring", "pdo_mysql"],
                "ini": {"memory_limit": "512M", "max_execution_time": "0"},
                "errors": [],
            }
        }
