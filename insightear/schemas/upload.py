"""Schemas for the upload endpoint."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Response after saving uploaded files to disk (data/uploads/)."""

    files_saved: int = Field(..., description="Number of files successfully saved.")
    paths: list[str] = Field(..., description="Relative paths to saved files, e.g. data/uploads/1718000000000-brief.txt")

    model_config = {
        "json_schema_extra": {
            "examples": [{"files_saved": 2, "paths": ["data/uploads/1718000000000-brief.txt", "data/uploads/1718000000001-survey.csv"]}]
        }
    }
