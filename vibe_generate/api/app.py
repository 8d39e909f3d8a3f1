from pathlib import Path

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..generator.engine import ScaffoldEngine
from ..generator.errors import (
    ConfigError,
    DestinationExists,
    NoTemplatesAvailable,
    PathCollision,
    PathEscape,
    ScaffoldIOError,
    TemplateNotFound,
)
from ..generator.registry import TemplateRegistry
from ..utils.config import load_settings

app = FastAPI(title="vibe-generate API", version="0.1.0")


class ScaffoldRequest(BaseModel):
    template: str | None = None
    name: str = Field(..., min_length=1)
    output_dir: Path = Field(default_factory=Path.cwd)


def get_registry() -> TemplateRegistry:
    try:
        return TemplateRegistry.discover(load_settings())
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/templates")
def templates():
    items = [{"name": d.name, "origin": d.origin.value} for d in get_registry().list()]
    return {"items": items}


@app.post("/scaffold", status_code=201)
def scaffold(req: ScaffoldRequest):
    if not req.template:
        raise HTTPException(status_code=400, detail="template is required")
    registry = get_registry()
    try:
        source = registry.resolve(req.template)
        dest = ScaffoldEngine().generate(source, req.name, req.output_dir.resolve())
    except TemplateNotFound as e:
        raise HTTPException(
            status_code=404, detail={"message": str(e), "available": e.available}
        ) from e
    except NoTemplatesAvailable as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except DestinationExists as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except (PathEscape, PathCollision) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ScaffoldIOError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return {"status": "ok", "path": str(dest)}
