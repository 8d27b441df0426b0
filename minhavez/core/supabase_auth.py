"""Supabase authentication helpers for staff requests."""
from typing import Optional, Dict, Any
from fastapi import HTTPException, status
import logging

from minhavez.config.database import get_supabase_client
from minhavez.models.business import Business
from minhavez.utils.supabase_helpers import safe_supabase_select_one

logger = logging.getLogger(__name__)


async def verify_supabase_token(token: str, supabase=None) -> Optional[Dict[str, Any]]:
    """
    Verify a Supabase access token using Supabase's built-in auth methods.
    Returns a claims-like dict, or None when the token is rejected.
    """
    if not token:
        return None

    supabase = supabase or get_supabase_client()
    try:
        user_response = supabase.auth.get_user(token)
    except Exception as auth_error:
        logger.warning(f"Supabase auth failed: {auth_error}")
        return None

    if not user_response or not getattr(user_response, "user", None):
        return None

    user = user_response.user
    return {
        "sub": user.id,
        "email": getattr(user, "email", None),
        "aud": "authenticated",
        "role": "authenticated",
        "user_metadata": getattr(user, "user_metadata", None) or {},
    }


async def get_current_supabase_user(token: str, supabase=None) -> Dict[str, Any]:
    """
    Get current authenticated Supabase user from access token.

    Raises:
        HTTPException: If token is missing, invalid or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No access token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_data = await verify_supabase_token(token, supabase)

    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired access token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_data


async def get_business_for_user(user_id: str, supabase) -> Business:
    """Each staff account owns exactly one business, found by user_id."""
    row = safe_supabase_select_one(supabase, "businesses", filters={"user_id": user_id})
    if not row:
        logger.warning(f"Business not found for user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Business account not found.",
        )
    return Business.from_dict(row)
