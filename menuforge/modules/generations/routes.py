from fastapi import APIRouter, Depends, HTTPException, Response
from functools import lru_cache
from menuforge.config import settings
from menuforge.database.supabase_client import get_supabase_admin
from menuforge.modules.generations.schemas import (
    GenerateRequest, GenerateResponse, GenerationCreate, GenerationResponse,
    SelectVariationRequest, SelectVariationResponse
)
from menuforge.modules.generations.service import GenerationService
from menuforge.modules.generations.designer import (
    MenuDesigner, DesignerError, DesignerUnavailable, is_provider_credit_error
)
from menuforge.modules.profiles.service import ProfileService
from menuforge.core.dependencies import (
    get_current_user, get_profile_service, require_generation_access, require_download_access
)
from supabase import Client
from typing import Dict, List, Union
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generations"])

MAX_VARIATION_INDEX = 2
GENERIC_FAILURE = "We encountered an issue generating your menu designs. Please try again later."
PROVIDER_CREDIT_FAILURE = (
    "The AI service is temporarily unavailable due to API credit limits. Please contact the administrator."
)


def get_generation_service(supabase: Client = Depends(get_supabase_admin)) -> GenerationService:
    return GenerationService(supabase)


@lru_cache
def get_menu_designer() -> MenuDesigner:
    return MenuDesigner()


def _check_variation(variation: Union[int, str]) -> int:
    try:
        index = int(variation)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid variation")
    if index < 0 or index > MAX_VARIATION_INDEX:
        raise HTTPException(status_code=400, detail="Invalid variation")
    return index


@router.post("/generate", response_model=GenerateResponse)
async def generate_menu(
    request_data: GenerateRequest,
    user_data: Dict = Depends(require_generation_access),
    profiles: ProfileService = Depends(get_profile_service),
    generations: GenerationService = Depends(get_generation_service),
    designer: MenuDesigner = Depends(get_menu_designer),
):
    """
    Generate HTML menu designs with the AI designer.
    Consumes one credit before calling the model (when payments are enabled),
    stores the result on the given generation or a new one, and returns the HTML.
    """
    user_id = user_data["id"]
    target = None
    if request_data.generation_id:
        target = generations.get_owned_generation(request_data.generation_id, user_id)

    logger.info(f"Generating menu designs for user: {user_data.get('email') or user_id}")

    if settings.payment_required:
        if not profiles.use_credit(user_id):
            raise HTTPException(
                status_code=403,
                detail={
                    "message": "Failed to use credit. Please check your credit balance.",
                    "needs_activation": False,
                    "needs_credits": True,
                }
            )
    else:
        # The access gate lets profile-less callers through when payments are off;
        # menu_generations.user_id references profiles.id
        if not profiles.ensure_profile(user_data):
            raise HTTPException(status_code=500, detail="Failed to create profile")
        profiles.increment_total_generated(user_id)

    try:
        html_variations = designer.generate(request_data)
    except DesignerUnavailable as e:
        logger.error(f"Designer unavailable: {e}")
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE)
    except DesignerError as e:
        logger.error(f"Error generating designs for user {user_id}: {e}")
        detail = PROVIDER_CREDIT_FAILURE if is_provider_credit_error(e) else GENERIC_FAILURE
        raise HTTPException(status_code=500, detail=detail)

    generation_id = None
    if target:
        generation_id = target.id
        if not generations.update_designs(target.id, html_variations):
            logger.error(f"Generated designs could not be stored on generation {target.id}")
    else:
        try:
            created = generations.create_generation(
                user_id,
                GenerationCreate(
                    file_name=request_data.file_name or "menu.txt",
                    extracted_text=request_data.menu_text,
                    colors=request_data.colors,
                    size=request_data.size,
                    style_prompt=request_data.style_prompt or "",
                ),
                html_variations=html_variations,
            )
            generation_id = created.id
        except HTTPException:
            logger.error(f"Generated designs for user {user_id} could not be stored")

    return GenerateResponse(html_variations=html_variations, generation_id=generation_id)


@router.post("/generations", response_model=GenerationResponse, status_code=201)
async def create_generation(
    generation_data: GenerationCreate,
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
    generations: GenerationService = Depends(get_generation_service),
):
    """Record an uploaded menu and its style choices before generating"""
    # menu_generations.user_id references profiles.id
    profiles.ensure_profile(user_data)
    return generations.create_generation(user_data["id"], generation_data)


@router.get("/generations", response_model=List[GenerationResponse])
async def list_generations(
    user_data: Dict = Depends(get_current_user),
    generations: GenerationService = Depends(get_generation_service),
):
    """List the caller's generations, newest first"""
    return generations.list_user_generations(user_data["id"])


@router.get("/generations/{generation_id}", response_model=GenerationResponse)
async def get_generation(
    generation_id: str,
    user_data: Dict = Depends(get_current_user),
    generations: GenerationService = Depends(get_generation_service),
):
    return generations.get_owned_generation(generation_id, user_data["id"])


@router.post("/generations/{generation_id}/select", response_model=SelectVariationResponse)
async def select_variation(
    generation_id: str,
    selection: SelectVariationRequest,
    user_data: Dict = Depends(get_current_user),
    generations: GenerationService = Depends(get_generation_service),
):
    """Remember which variation the user picked (0-2)"""
    generations.get_owned_generation(generation_id, user_data["id"])
    index = _check_variation(selection.variation)
    if not generations.select_variation(generation_id, index):
        raise HTTPException(status_code=500, detail="Failed to select variation")
    return SelectVariationResponse(success=True)


@router.get("/generations/{generation_id}/download/{variation}")
async def download_design(
    generation_id: str,
    variation: str,
    user_data: Dict = Depends(require_download_access),
    generations: GenerationService = Depends(get_generation_service),
):
    """Download one design as an HTML attachment. Requires activation when payments are enabled."""
    generation = generations.get_owned_generation(generation_id, user_data["id"])
    index = _check_variation(variation)
    designs = generation.html_variations or []
    if index >= len(designs) or not designs[index]:
        raise HTTPException(status_code=404, detail="Design not found")

    generations.mark_downloaded(generation_id)
    return Response(
        content=designs[index],
        media_type="text/html",
        headers={"Content-Disposition": f'attachment; filename="menu-design-{index + 1}.html"'},
    )
