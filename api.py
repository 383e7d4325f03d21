# api.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import Settings, configure_logging, load_settings
from entities import (
    CANDIDATES,
    CLIENTS,
    JOB_REQUISITIONS,
    MANAGER_PROFILES,
    SUPPORT_TICKETS,
    CandidateCreate,
    CandidateUpdate,
    ClientCreate,
    ClientUpdate,
    JobRequisitionCreate,
    JobRequisitionUpdate,
    ManagerProfileCreate,
    ManagerProfileUpdate,
    SupportTicketCreate,
    SupportTicketUpdate,
)
from errors import InputValidationError, NoOutputError, TransportError
from flow_runner import FlowRunner
from flows import FLOWS
from llm_client import GeminiClient
from resume_matcher import match_resume_to_jobs
from store import DocumentNotFoundError, DocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)


def get_runner(request: Request) -> FlowRunner:
    return request.app.state.runner


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


class MatchJobsRequest(BaseModel):
    resume_data_uri: str


# ---------- Error mapping ----------

async def _input_error(request: Request, exc: InputValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


async def _no_output(request: Request, exc: NoOutputError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def _transport_error(request: Request, exc: TransportError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


async def _not_found(request: Request, exc: DocumentNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ---------- CRUD ----------

def crud_router(
    collection: str,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
) -> APIRouter:
    router = APIRouter()

    @router.get("")
    async def list_documents(store: DocumentStore = Depends(get_store)) -> List[Dict[str, Any]]:
        return await store.list(collection)

    @router.get("/{doc_id}")
    async def get_document(doc_id: str, store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
        return await store.get(collection, doc_id)

    @router.post("", status_code=201)
    async def create_document(
        body: create_model,
        store: DocumentStore = Depends(get_store),
    ) -> Dict[str, Any]:
        return await store.create(collection, body.model_dump(mode="json"))

    @router.put("/{doc_id}")
    async def update_document(
        doc_id: str,
        body: update_model,
        store: DocumentStore = Depends(get_store),
    ) -> Dict[str, Any]:
        # Partial update: omitted or null fields keep their stored value
        changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        return await store.update(collection, doc_id, changes)

    @router.delete("/{doc_id}")
    async def delete_document(doc_id: str, store: DocumentStore = Depends(get_store)) -> Dict[str, str]:
        await store.delete(collection, doc_id)
        return {"message": f"{collection} {doc_id} deleted"}

    return router


# ---------- App ----------

def create_app(
    settings: Optional[Settings] = None,
    *,
    runner: Optional[FlowRunner] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.runner is None:
            client = GeminiClient.from_settings(settings)
            app.state.runner = FlowRunner.from_settings(settings, client)
            logger.info("Flow runner ready (default model %s)", settings.gemini_model)
        yield

    app = FastAPI(title="Talent Flows", lifespan=lifespan)
    app.state.settings = settings
    app.state.runner = runner
    app.state.store = store if store is not None else InMemoryDocumentStore()

    app.add_exception_handler(InputValidationError, _input_error)
    app.add_exception_handler(NoOutputError, _no_output)
    app.add_exception_handler(TransportError, _transport_error)
    app.add_exception_handler(DocumentNotFoundError, _not_found)

    @app.get("/")
    def root():
        return {"status": "running", "flows": len(FLOWS)}

    @app.get("/flows")
    def list_flows():
        return [
            {"name": name, "input_schema": spec.input_model.model_json_schema()}
            for name, spec in FLOWS.items()
        ]

    @app.post("/flows/{flow_name}")
    async def run_flow(
        flow_name: str,
        payload: Dict[str, Any] = Body(...),
        runner: FlowRunner = Depends(get_runner),
    ):
        spec = FLOWS.get(flow_name)
        if spec is None:
            raise HTTPException(status_code=404, detail=f"unknown flow: {flow_name}")
        output = await runner.invoke(spec, payload)
        return output.model_dump(mode="json")

    @app.post("/candidates/match-jobs")
    async def match_jobs(
        body: MatchJobsRequest,
        runner: FlowRunner = Depends(get_runner),
        store: DocumentStore = Depends(get_store),
    ):
        open_jobs = await store.list(JOB_REQUISITIONS, status="Open")
        requisitions = [
            {
                "id": job["id"],
                "title": job["title"],
                "description": job.get("description", ""),
                "skills_required": job.get("skills_required", []),
            }
            for job in open_jobs
        ]
        result = await match_resume_to_jobs(runner, body.resume_data_uri, requisitions)
        return result.model_dump(mode="json")

    app.include_router(
        crud_router(JOB_REQUISITIONS, JobRequisitionCreate, JobRequisitionUpdate),
        prefix="/job-requisitions",
        tags=["Job Requisitions"],
    )
    app.include_router(
        crud_router(CANDIDATES, CandidateCreate, CandidateUpdate),
        prefix="/candidates",
        tags=["Candidates"],
    )
    app.include_router(
        crud_router(CLIENTS, ClientCreate, ClientUpdate),
        prefix="/clients",
        tags=["Clients"],
    )
    app.include_router(
        crud_router(MANAGER_PROFILES, ManagerProfileCreate, ManagerProfileUpdate),
        prefix="/managers",
        tags=["Managers"],
    )
    app.include_router(
        crud_router(SUPPORT_TICKETS, SupportTicketCreate, SupportTicketUpdate),
        prefix="/support-tickets",
        tags=["Support"],
    )

    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "api:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    main()
