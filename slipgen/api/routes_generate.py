from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from slipgen.api.deps import get_link_generator, require_operator
from slipgen.api.schemas import EnqueueResponse, GenerateLinkFailure, GenerateLinkResponse
from slipgen.core.errors import RunInProgressError, SlipNotFoundError
from slipgen.services.link_generator import SlipLinkGenerator
from slipgen.workers.tasks import generate_link as generate_link_task

router = APIRouter(prefix="/generate-link", tags=["generate-link"])


@router.post(
    "/{slip_id}",
    response_model=GenerateLinkResponse,
    responses={500: {"model": GenerateLinkFailure}},
)
def generate_link(
    slip_id: str,
    generator: SlipLinkGenerator = Depends(get_link_generator),
    operator: str = Depends(require_operator),
):
    del operator
    try:
        result = generator.run(slip_id)
    except SlipNotFoundError:
        raise HTTPException(status_code=404, detail="Slip not found")
    except RunInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    if result.failed:
        failure = GenerateLinkFailure(error=result.error or "run failed", logs=result.logs)
        return JSONResponse(status_code=500, content=failure.model_dump(mode="json"))
    return GenerateLinkResponse(status=result.status, url=result.url, logs=result.logs)


@router.post("/{slip_id}/enqueue", response_model=EnqueueResponse, status_code=status.HTTP_202_ACCEPTED)
def enqueue_generate_link(
    slip_id: str,
    operator: str = Depends(require_operator),
):
    task = generate_link_task.delay(slip_id, actor_id=operator)
    return EnqueueResponse(task_id=str(task.id), slip_id=slip_id)
