from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    page_number: int = Field(..., ge=1)
    chunk_index: int = Field(..., ge=0)
    start_char: int
    end_char: int


class ChunkOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(800, gt=0)
    chunk_overlap: int = Field(150, ge=0)
    min_chunk_size: int = Field(100, ge=0)

    @model_validator(mode="after")
    def _overlap_below_size(self) -> "ChunkOptions":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be < chunk_size")
        return self
