"""Assistant tool routes: list tools and run one directly."""
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, Path

from ..agents import run_tool, tool_specs
from ..models import ToolCallRequest, ToolListResponse, ToolSpec
from ..services import SanityClient
from ..services.exceptions import ToolInputError, ToolNotFoundError
from ..utils.logger import logger
from .deps import get_current_user_id

router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.get("", response_model=ToolListResponse)
async def list_tools() -> ToolListResponse:
    """List the assistant's tools with their input schemas."""
    specs = [ToolSpec(**spec) for spec in tool_specs()]
    return ToolListResponse(tools=specs, total=len(specs))


@router.post("/{tool_name}")
async def call_tool(
    request: ToolCallRequest,
    tool_name: str = Path(..., description="Tool name, e.g. searchClasses"),
    user_id: Optional[str] = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """Run one tool with the given arguments.

    The bookings tool always runs for the signed-in caller.
    """
    arguments = dict(request.arguments)
    if tool_name == "getUserBookings":
        arguments["clerkId"] = user_id

    try:
        async with SanityClient() as client:
            return await run_tool(tool_name, arguments, client)

    except ToolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ToolInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Tool {tool_name} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Tool {tool_name} failed: {str(e)}")
