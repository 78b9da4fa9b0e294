import asyncio
import logging
import os
from pathlib import Path

from fastapi import FastAPI, UploadFile, File, HTTPException, Request
from fastapi.responses import Response

from . import __version__
from .audio import wav_bytes
from .config import Settings
from .errors import PresetFormatError, SpectralError
from .models import (
    EqualizerPreset,
    ProcessRequest,
    ProcessResponse,
    SpectrogramResponse,
    UploadResponse,
)
from .presets import PresetStore, export_preset, import_preset
from .session import AudioSession, SessionRegistry, get_session_dir, new_session_id
from .stft import frame_frequencies, frame_times

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _session_or_404(request: Request, session_id: str) -> AudioSession:
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Spectral Equalizer", version=__version__)
    app.state.settings = settings
    app.state.sessions = SessionRegistry()
    app.state.presets = PresetStore(settings.preset_path)

    @app.post("/api/upload", response_model=UploadResponse)
    async def upload(request: Request, audio: UploadFile = File(...)):
        """Decode an audio file, mix it to mono and compute its input spectrum."""
        ext = Path(audio.filename or "").suffix.lower()
        if ext not in settings.supported_extensions:
            raise HTTPException(
                400, f"Unsupported format. Supported: {', '.join(sorted(settings.supported_extensions))}"
            )

        data = await audio.read()
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(413, "File too large")

        session_id = new_session_id()
        session_dir = get_session_dir(settings.upload_dir, session_id)
        input_path = os.path.join(session_dir, f"input{ext}")
        with open(input_path, "wb") as f:
            f.write(data)

        try:
            session = await asyncio.to_thread(
                AudioSession.from_file,
                input_path,
                frame_size=settings.stft_frame_size,
                hop_size=settings.stft_hop_size,
            )
            slices = await asyncio.to_thread(session.input_slices)
        except SpectralError as e:
            raise HTTPException(422, f"Cannot process this buffer: {e}")
        except Exception as e:
            logger.exception("Failed to load %s", audio.filename)
            raise HTTPException(400, f"Failed to load audio file: {e}")

        request.app.state.sessions.add(session, session_id)
        logger.info(
            "Session %s: loaded %s (%d samples @ %d Hz)",
            session_id, audio.filename, len(session.input), session.sample_rate,
        )

        return UploadResponse(
            session_id=session_id,
            filename=audio.filename or f"input{ext}",
            sample_rate=session.sample_rate,
            n_samples=len(session.input),
            fft_size=session.fft_size,
            duration=session.duration,
            n_frames=int(slices.shape[0]),
            input_spectrum=session.input_spectrum(),
        )

    @app.post("/api/process", response_model=ProcessResponse)
    async def process(request: Request, req: ProcessRequest):
        """Equalize the session's input with the requested bands."""
        session = _session_or_404(request, req.session_id)
        try:
            await asyncio.to_thread(session.process, req.bands)
            slices = await asyncio.to_thread(session.output_slices)
        except SpectralError as e:
            raise HTTPException(422, f"Cannot process this buffer: {e}")

        return ProcessResponse(
            session_id=req.session_id,
            n_samples=len(session.output),
            n_frames=int(slices.shape[0]),
            output_spectrum=session.output_spectrum(),
        )

    @app.post("/api/reset/{session_id}", response_model=ProcessResponse)
    async def reset(request: Request, session_id: str):
        session = _session_or_404(request, session_id)
        session.reset()
        return ProcessResponse(
            session_id=session_id,
            n_samples=len(session.output),
            n_frames=int(session.output_slices().shape[0]),
            output_spectrum=session.output_spectrum(),
        )

    @app.get("/api/spectrogram/{session_id}/{which}", response_model=SpectrogramResponse)
    async def spectrogram(request: Request, session_id: str, which: str):
        if which not in ("input", "output"):
            raise HTTPException(400, "Invalid spectrogram type")
        session = _session_or_404(request, session_id)
        compute = session.input_slices if which == "input" else session.output_slices
        slices = await asyncio.to_thread(compute)

        return SpectrogramResponse(
            session_id=session_id,
            which=which,
            frame_size=session.frame_size,
            hop_size=session.hop_size,
            frame_times=frame_times(slices.shape[0], session.sample_rate, session.hop_size).round(4).tolist(),
            frequencies=frame_frequencies(session.sample_rate, session.frame_size).tolist(),
            slices=slices.tolist(),
        )

    @app.get("/api/export/{session_id}")
    async def export(request: Request, session_id: str):
        """Download the current output as 16-bit PCM WAV."""
        session = _session_or_404(request, session_id)
        data = await asyncio.to_thread(wav_bytes, session.output, session.sample_rate)
        filename = f"processed_{session_id}.wav"
        return Response(
            content=data,
            media_type="audio/wav",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/api/presets", response_model=list[EqualizerPreset])
    async def list_presets(request: Request):
        return request.app.state.presets.load_all()

    @app.post("/api/presets", response_model=EqualizerPreset)
    async def save_preset(request: Request, preset: EqualizerPreset):
        request.app.state.presets.save(preset)
        logger.info("Saved preset %r (%d bands)", preset.name, len(preset.ranges))
        return preset

    @app.post("/api/presets/import", response_model=EqualizerPreset)
    async def import_preset_file(request: Request, file: UploadFile = File(...)):
        text = (await file.read()).decode("utf-8", errors="replace")
        try:
            preset = import_preset(text)
        except PresetFormatError as e:
            raise HTTPException(400, str(e))
        request.app.state.presets.save(preset)
        return preset

    @app.get("/api/presets/{name}")
    async def get_preset(request: Request, name: str):
        """Export one preset as a downloadable JSON document."""
        preset = request.app.state.presets.get(name)
        if preset is None:
            raise HTTPException(404, "Preset not found")
        filename = "_".join(preset.name.split()) + ".json"
        return Response(
            content=export_preset(preset),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.delete("/api/presets/{name}")
    async def delete_preset(request: Request, name: str):
        if not request.app.state.presets.delete(name):
            raise HTTPException(404, "Preset not found")
        return {"deleted": name}

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=os.environ.get("SPECTRAL_EQ_HOST", "127.0.0.1"),
        port=int(os.environ.get("SPECTRAL_EQ_PORT", "8000")),
    )
