from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from synapse.graph.graph_export import export_filename, graph_to_csv
from synapse.graph.graph_store import GraphStore

from backend.app.api.schemas import (
    GraphData,
    HistoryItem,
    HistoryStatsResponse,
    MessageResponse,
    RenameHistoryRequest,
    RenameHistoryResponse,
)
from backend.app.db.models import History, User
from backend.app.dependencies import get_current_user, get_db
from backend.app.errors import AppError, ErrorType

router = APIRouter()


def _owned_item(db: Session, item_id: str, user: User) -> History:
    item = db.get(History, item_id)
    if item is None:
        raise AppError("History item not found", 404, ErrorType.NOT_FOUND)
    if item.user_id != user.id:
        raise AppError("Not authorized", 401, ErrorType.AUTHORIZATION)
    return item


def _to_item(item: History) -> HistoryItem:
    graph = item.graph_data or {}
    return HistoryItem(
        id=item.id,
        name=item.name,
        graphData=GraphData(
            nodes=graph.get("nodes") or [],
            edges=graph.get("edges") or [],
            diagramType=graph.get("diagramType") or "knowledge-graph",
        ),
        inputs=item.inputs or {},
        createdAt=item.created_at.isoformat(),
        updatedAt=item.updated_at.isoformat(),
    )


@router.get("/", response_model=list[HistoryItem])
def get_history(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items = db.scalars(
        select(History)
        .where(History.user_id == user.id)
        .order_by(History.created_at.desc())
    ).all()
    return [_to_item(item) for item in items]


@router.delete("/", response_model=MessageResponse)
def clear_history(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    db.execute(delete(History).where(History.user_id == user.id))
    db.commit()
    return MessageResponse(message="All history items removed")


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_history_item(
    item_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _owned_item(db, item_id, user)
    db.delete(item)
    db.commit()
    return MessageResponse(message="History item removed")


@router.patch("/{item_id}/name", response_model=RenameHistoryResponse)
def rename_history_item(
    item_id: str,
    request: RenameHistoryRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _owned_item(db, item_id, user)
    item.name = request.name or ""
    db.commit()
    return RenameHistoryResponse(message="Name updated", name=item.name)


@router.get("/{item_id}/stats", response_model=HistoryStatsResponse)
def history_stats(
    item_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _owned_item(db, item_id, user)
    graph = GraphStore.from_graph_data(item.graph_data or {})
    stats = graph.stats()
    return HistoryStatsResponse(
        nodes=graph.node_count(),
        edges=graph.edge_count(),
        components=stats["components"],
        isolatedNodes=stats["isolated_nodes"],
        nodeTypes=stats["node_types"],
        nodeSentiments=stats["node_sentiments"],
        edgeSentiments=stats["edge_sentiments"],
        duplicateNodeIds=stats["duplicate_node_ids"],
        danglingEdges=stats["dangling_edges"],
    )


@router.get("/{item_id}/export/{kind}")
def export_history_item(
    item_id: str,
    kind: Literal["nodes", "edges"],
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _owned_item(db, item_id, user)
    graph = item.graph_data or {}
    filename = export_filename(
        kind,
        graph.get("diagramType") or "knowledge-graph",
        item.created_at.date().isoformat(),
    )
    return Response(
        content=graph_to_csv(graph.get(kind) or []),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
