from typing import List, Dict, Any, Optional
from pydantic import BaseModel


# ---------------- Users ----------------


class CredentialsRequest(BaseModel):
    email: str = ""
    password: str = ""


class ResetPasswordRequest(BaseModel):
    email: str = ""
    newPassword: str = ""


class SendVerificationRequest(BaseModel):
    email: str = ""


class VerifyEmailRequest(BaseModel):
    email: str = ""
    otp: str = ""


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    email: str
    token: str
    hasSeenTutorial: bool


class LoginResponse(BaseModel):
    id: str
    email: str
    token: str
    hasSeenTutorial: bool


class TutorialResponse(BaseModel):
    message: str
    hasSeenTutorial: bool


# ---------------- Graph ----------------


class GraphData(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    diagramType: str = "knowledge-graph"


class GenerateResponse(BaseModel):
    answer: str
    graphData: GraphData
    historyId: str


# ---------------- History ----------------


class HistoryItem(BaseModel):
    id: str
    name: str
    graphData: GraphData
    inputs: Dict[str, Any]
    createdAt: str
    updatedAt: str


class RenameHistoryRequest(BaseModel):
    name: Optional[str] = None


class RenameHistoryResponse(BaseModel):
    message: str
    name: str


class HistoryStatsResponse(BaseModel):
    nodes: int
    edges: int
    components: int
    isolatedNodes: List[str]
    nodeTypes: Dict[str, int]
    nodeSentiments: Dict[str, int]
    edgeSentiments: Dict[str, int]
    duplicateNodeIds: List[str]
    danglingEdges: List[Any]
