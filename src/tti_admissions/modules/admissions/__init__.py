"""
Admissions Module

Candidate submissions and the HEAD -> TEACHER review workflow:
1. Submission with documents and duplicate detection
2. HEAD approves, rejects or soft-deletes
3. A course TEACHER schedules the interview
4. The TEACHER records the final decision

API Endpoints:
- POST /admissions - Submit an application (multipart)
- PUT /admissions/{id}/head-approve, /head-reject, /head-delete
- POST /admissions/{id}/schedule-interview
- PUT /admissions/{id}/final-approve, /final-reject
- GET /admissions, /admissions/views/{view}, /admissions/{id}

The router is not re-exported here: core.auth imports this package's
models, and the router imports core.auth. Import it from
tti_admissions.modules.admissions.router.
"""
