"""FastAPI main application."""

import time
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..config import configure_logging, list_presets, get_preset, settings
from ..core.errors import ConfigurationError
from ..core.heightfield_generator import Basis, HeightfieldConfig, HeightfieldGenerator, normalize_seed
from ..core.octaves import OctaveSpec
from ..utils.image import heightfield_to_base64

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Heightfield Generator API",
    description="Seeded multi-octave gradient-noise terrain heightfields",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class OctaveModel(BaseModel):
    """One octave pass."""

    scale: float = Field(..., description="Noise units per grid cell")
    weight: float = Field(..., description="Amplitude of the pass")
    x_offset: float = Field(0.0, description="Domain offset along x")
    y_offset: float = Field(0.0, description="Domain offset along y")


class HeightfieldRequest(BaseModel):
    """Request to generate a heightfield."""

    seed: Optional[int] = Field(None, description="Seed for reproducible generation; derived from the clock when omitted")
    grid_size: Optional[int] = Field(None, description="Grid resolution N")
    octaves: Optional[List[OctaveModel]] = Field(None, description="Explicit octaves, overrides the preset")
    preset: Optional[str] = Field(None, description="Octave preset name")
    offset_mode: Optional[str] = Field(None, description="random or zero")
    gradient_factor: Optional[float] = Field(None, description="Slope damping strength")
    normalize_mode: str = Field("clamp", description="clamp or rescale")
    basis: str = Field("simplex", description="simplex or sine")
    slice_z: Optional[float] = Field(None, description="Sample a z-slice of 3D noise")
    include_preview: bool = Field(False, description="Attach a grayscale PNG preview")


class HeightfieldSummary(BaseModel):
    """Summary of a generated heightfield."""

    seed: int
    grid_size: int
    basis: str
    octave_count: int
    min_height: float
    max_height: float
    mean_height: float
    generation_time_seconds: float
    preview_png: Optional[str] = None


class PresetLayer(BaseModel):
    frequency: float
    weight: float


def build_config(request: HeightfieldRequest) -> HeightfieldConfig:
    """Merge a request with the configured defaults."""
    grid_size = request.grid_size if request.grid_size is not None else settings.default_grid_size
    if isinstance(grid_size, int) and grid_size > settings.max_grid_size:
        raise ConfigurationError(f"grid_size {grid_size} exceeds the maximum of {settings.max_grid_size}")

    octaves = None
    if request.octaves is not None:
        octaves = [OctaveSpec(o.scale, o.weight, o.x_offset, o.y_offset) for o in request.octaves]

    return HeightfieldConfig(
        grid_size=grid_size,
        octaves=octaves,
        preset=request.preset or settings.default_preset,
        offset_mode=request.offset_mode or settings.offset_mode,
        gradient_factor=(
            request.gradient_factor if request.gradient_factor is not None else settings.default_gradient_factor
        ),
        normalize_mode=request.normalize_mode,
        basis=request.basis,
        slice_z=request.slice_z,
        workers=settings.row_workers,
    )


def run_generation(request: HeightfieldRequest) -> Tuple[int, HeightfieldGenerator, np.ndarray, float]:
    """Validate and generate, mapping configuration problems to 422."""
    seed = request.seed if request.seed is not None else int(time.time() * 1000)
    try:
        seed = normalize_seed(seed)
        generator = HeightfieldGenerator(build_config(request))
        start = time.perf_counter()
        heights = generator.generate(seed)
    except ConfigurationError as e:
        logger.warning("Rejected heightfield request", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))
    return seed, generator, heights, time.perf_counter() - start


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Heightfield Generator API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/presets", response_model=Dict[str, List[PresetLayer]])
async def presets():
    """List octave presets and their layers."""
    return {
        name: [PresetLayer(frequency=f, weight=w) for f, w in get_preset(name)]
        for name in list_presets()
    }


@app.post("/heightfields/generate", response_model=HeightfieldSummary)
def generate_heightfield(request: HeightfieldRequest):
    """Generate a heightfield and return its statistics."""
    logger.info("Heightfield generation requested", request=request.model_dump(exclude={"octaves"}))
    seed, generator, heights, seconds = run_generation(request)

    config = generator.config
    octave_count = 0 if Basis(config.basis) == Basis.SINE else len(generator.resolve_octaves(seed))

    return HeightfieldSummary(
        seed=seed,
        grid_size=config.grid_size,
        basis=Basis(config.basis).value,
        octave_count=octave_count,
        min_height=float(heights.min()),
        max_height=float(heights.max()),
        mean_height=float(heights.mean()),
        generation_time_seconds=seconds,
        preview_png=heightfield_to_base64(heights) if request.include_preview else None,
    )


@app.post("/heightfields/raw")
def generate_heightfield_raw(request: HeightfieldRequest):
    """
    Generate a heightfield as raw little-endian float32 samples.

    Row-major, origin at the top-left; the grid size and seed are returned
    in headers.
    """
    seed, generator, heights, _ = run_generation(request)
    return Response(
        content=heights.astype("<f4").tobytes(),
        media_type="application/octet-stream",
        headers={
            "X-Seed": str(seed),
            "X-Grid-Size": str(generator.config.grid_size),
            "X-Dtype": "float32-le",
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
