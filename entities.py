# entities.py
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from schemas import NonEmptyStr

JOB_REQUISITIONS = "job_requisitions"
CANDIDATES = "candidates"
CLIENTS = "clients"
MANAGER_PROFILES = "manager_profiles"
SUPPORT_TICKETS = "support_tickets"

JobRequisitionStatus = Literal["Open", "Closed", "On Hold", "Draft"]
JobPriority = Literal["High", "Medium", "Low"]
CandidateStage = Literal["Sourced", "Screening", "Interview", "Offer", "Hired", "Rejected"]
TicketStatus = Literal["Open", "In Progress", "Resolved", "Closed"]


# ---------- Job requisitions ----------

class JobRequisitionCreate(BaseModel):
    title: NonEmptyStr
    department: NonEmptyStr
    location: NonEmptyStr
    status: JobRequisitionStatus
    description: NonEmptyStr
    skills_required: List[str] = Field(default_factory=list)
    hiring_manager: NonEmptyStr
    priority: Optional[JobPriority] = None
    date_posted: date = Field(default_factory=date.today)


class JobRequisitionUpdate(BaseModel):
    title: Optional[NonEmptyStr] = None
    department: Optional[NonEmptyStr] = None
    location: Optional[NonEmptyStr] = None
    status: Optional[JobRequisitionStatus] = None
    description: Optional[NonEmptyStr] = None
    skills_required: Optional[List[str]] = None
    hiring_manager: Optional[NonEmptyStr] = None
    priority: Optional[JobPriority] = None


# ---------- Candidates (pipeline cards) ----------

class CandidateCreate(BaseModel):
    name: NonEmptyStr
    email: NonEmptyStr
    job_title: NonEmptyStr
    stage: CandidateStage = "Sourced"
    applied_date: date = Field(default_factory=date.today)
    last_contacted: Optional[date] = None
    resume_summary: Optional[str] = None
    sentiment: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class CandidateUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    email: Optional[NonEmptyStr] = None
    job_title: Optional[NonEmptyStr] = None
    stage: Optional[CandidateStage] = None
    last_contacted: Optional[date] = None
    resume_summary: Optional[str] = None
    sentiment: Optional[str] = None
    skills: Optional[List[str]] = None
    notes: Optional[str] = None


# ---------- Clients ----------

class ClientCreate(BaseModel):
    company_name: NonEmptyStr
    contact_person: NonEmptyStr
    email: NonEmptyStr
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    active_requisitions: int = Field(default=0, ge=0)
    total_hires: int = Field(default=0, ge=0)


class ClientUpdate(BaseModel):
    company_name: Optional[NonEmptyStr] = None
    contact_person: Optional[NonEmptyStr] = None
    email: Optional[NonEmptyStr] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    active_requisitions: Optional[int] = Field(default=None, ge=0)
    total_hires: Optional[int] = Field(default=None, ge=0)


# ---------- Hiring manager profiles ----------

class ManagerProfileCreate(BaseModel):
    name: NonEmptyStr
    email: NonEmptyStr
    department: NonEmptyStr
    avatar_url: Optional[str] = None
    active_requisitions: int = Field(default=0, ge=0)
    team_size: int = Field(default=0, ge=0)
    hiring_since: Optional[date] = None


class ManagerProfileUpdate(BaseModel):
    name: Optional[NonEmptyStr] = None
    email: Optional[NonEmptyStr] = None
    department: Optional[NonEmptyStr] = None
    avatar_url: Optional[str] = None
    active_requisitions: Optional[int] = Field(default=None, ge=0)
    team_size: Optional[int] = Field(default=None, ge=0)
    hiring_since: Optional[date] = None


# ---------- Support tickets ----------

class SupportTicketCreate(BaseModel):
    subject: NonEmptyStr
    issue_description: NonEmptyStr
    attachment_name: Optional[str] = None
    attachment_size: Optional[int] = Field(default=None, ge=0)
    status: TicketStatus = "Open"
    user_id: Optional[str] = None
    user_email: Optional[str] = None


class SupportTicketUpdate(BaseModel):
    subject: Optional[NonEmptyStr] = None
    issue_description: Optional[NonEmptyStr] = None
    status: Optional[TicketStatus] = None
