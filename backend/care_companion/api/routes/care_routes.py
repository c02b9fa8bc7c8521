# backend/care_companion/api/routes/care_routes.py

from datetime import date as dt_date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from care_companion.models.care import CareState, Dose, DoseStatus, HistoryEntry, Medicine
from care_companion.services.ai_service import CareAI
from care_companion.services.care_service import extract_and_schedule, run_interaction_check
from care_companion.services.care_store import CareStore

router = APIRouter(prefix="/care", tags=["care"])


class StatusChange(BaseModel):
    status: DoseStatus


class RemedyIn(BaseModel):
    name: str


class DayView(BaseModel):
    date: str
    progress: int
    doses: List[Dose]


def get_store(request: Request) -> CareStore:
    return request.app.state.care_store


def get_ai(request: Request) -> CareAI:
    return request.app.state.care_ai


@router.get("/state", response_model=CareState)
async def get_state(store: CareStore = Depends(get_store)):
    return store.state


@router.post("/prescriptions")
async def upload_prescription(
    image: UploadFile = File(...),
    store: CareStore = Depends(get_store),
    ai: CareAI = Depends(get_ai),
):
    """
    Receives a prescription photo, extracts the medicines and
    adds a fresh dose schedule for them.
    """
    image_bytes = await image.read()
    if not image_bytes:
        return JSONResponse({"error": "Empty upload"}, status_code=400)

    result = extract_and_schedule(store, ai, image_bytes, image.content_type or "image/jpeg")
    if not result.success:
        return JSONResponse({"error": result.message}, status_code=422)
    return result


@router.post("/medicines", response_model=CareState)
async def add_medicines(
    medicines: List[Medicine],
    schedule: bool = False,
    store: CareStore = Depends(get_store),
):
    if schedule:
        store.generate_schedule(medicines)
    else:
        store.add_medicines(medicines)
    return store.state


@router.get("/dates", response_model=List[str])
async def get_dates(store: CareStore = Depends(get_store)):
    return store.schedule_dates()


@router.get("/doses", response_model=DayView)
async def get_doses(date: Optional[dt_date] = None, store: CareStore = Depends(get_store)):
    day = date or store.today()
    return DayView(date=day.isoformat(), progress=store.daily_progress(day), doses=store.doses_for(day))


@router.put("/doses/{dose_id}/status", response_model=Dose)
async def set_dose_status(dose_id: str, change: StatusChange, store: CareStore = Depends(get_store)):
    store.toggle_dose(dose_id, change.status)
    dose = store.find_dose(dose_id)
    if dose is None:
        raise HTTPException(status_code=404, detail="Dose not found")
    return dose


@router.post("/doses/{dose_id}/flip", response_model=Dose)
async def flip_dose_status(dose_id: str, change: StatusChange, store: CareStore = Depends(get_store)):
    store.flip_dose(dose_id, change.status)
    dose = store.find_dose(dose_id)
    if dose is None:
        raise HTTPException(status_code=404, detail="Dose not found")
    return dose


@router.get("/history", response_model=List[HistoryEntry])
async def get_history(store: CareStore = Depends(get_store)):
    return store.state.history


@router.post("/remedies", response_model=List[str])
async def add_remedy(remedy: RemedyIn, store: CareStore = Depends(get_store)):
    name = remedy.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Remedy name is empty")
    store.add_remedy(name)
    return store.state.remedies


@router.delete("/remedies/{name}", response_model=List[str])
async def remove_remedy(name: str, store: CareStore = Depends(get_store)):
    store.remove_remedy(name)
    return store.state.remedies


@router.post("/interactions/check")
async def check_interactions(store: CareStore = Depends(get_store), ai: CareAI = Depends(get_ai)):
    result = run_interaction_check(store, ai)
    if not result.success:
        return JSONResponse({"error": result.message}, status_code=502)
    interactions: Dict[str, dict] = {
        m.id: m.potentialInteractions.model_dump()
        for m in store.state.medicines
        if m.potentialInteractions is not None
    }
    return {"message": result.message, "count": result.count, "interactions": interactions}


@router.delete("", response_model=CareState)
async def clear_all(store: CareStore = Depends(get_store)):
    store.clear_all()
    return store.state
