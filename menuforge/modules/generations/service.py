from supabase import Client
from menuforge.modules.generations.schemas import GenerationCreate, GenerationResponse
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class GenerationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_generation(
        self,
        user_id: str,
        generation_data: GenerationCreate,
        html_variations: Optional[List[str]] = None
    ) -> GenerationResponse:
        """Create a menu generation record"""
        try:
            result = self.supabase.table("menu_generations").insert({
                "user_id": user_id,
                "file_name": generation_data.file_name,
                "extracted_text": generation_data.extracted_text,
                "colors": generation_data.colors,
                "size": generation_data.size,
                "style_prompt": generation_data.style_prompt,
                "html_variations": html_variations,
                "selected_variation": None,
                "is_downloaded": False,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating menu generation for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create generation")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create generation")
        return GenerationResponse(**result.data[0])

    def get_generation(self, generation_id: str) -> Optional[GenerationResponse]:
        """Get a generation by ID, or None"""
        try:
            result = self.supabase.table("menu_generations")\
                .select("*")\
                .eq("id", generation_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            # malformed ids fail the uuid cast in Postgres; treat as not found
            logger.error(f"Error fetching menu generation {generation_id}: {e}")
            return None
        if not result.data:
            return None
        return GenerationResponse(**result.data[0])

    def get_owned_generation(self, generation_id: str, user_id: str) -> GenerationResponse:
        """Get a generation the caller owns: 404 when missing, 403 when it belongs to someone else"""
        generation = self.get_generation(generation_id)
        if not generation:
            raise HTTPException(status_code=404, detail="Generation not found")
        if generation.user_id != user_id:
            raise HTTPException(status_code=403, detail="Access denied")
        return generation

    def list_user_generations(self, user_id: str) -> List[GenerationResponse]:
        """All generations for a user, newest first"""
        try:
            result = self.supabase.table("menu_generations")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching generations for {user_id}: {e}")
            return []
        return [GenerationResponse(**row) for row in result.data or []]

    def _update(self, generation_id: str, update_data: Dict[str, Any], action: str) -> bool:
        try:
            self.supabase.table("menu_generations")\
                .update(update_data)\
                .eq("id", generation_id)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Error {action} for generation {generation_id}: {e}")
            return False

    def update_designs(self, generation_id: str, html_variations: List[str]) -> bool:
        return self._update(generation_id, {"html_variations": html_variations}, "updating designs")

    def select_variation(self, generation_id: str, variation: int) -> bool:
        return self._update(generation_id, {"selected_variation": variation}, "selecting variation")

    def mark_downloaded(self, generation_id: str) -> bool:
        return self._update(generation_id, {"is_downloaded": True}, "marking downloaded")
