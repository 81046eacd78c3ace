"""
CLIENT ACCESS - Registro de acesso das listas
=============================================

Chamado pelo app da TV quando o usuário final entra.
Valida credenciais no provedor e conta a lista no mês.
"""

from fastapi import APIRouter, Depends

from iptv_panel.api.dependencies import get_client_meta, get_quota_gate
from iptv_panel.api.schemas.schemas import ClientAccessRequest, ClientAccessResponse, ErrorResponse
from iptv_panel.application.services import ClientMeta, QuotaGate

router = APIRouter(prefix="/client-access", tags=["Acesso do Cliente"])


@router.post(
    "",
    response_model=ClientAccessResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def register_client_access(
    payload: ClientAccessRequest,
    meta: ClientMeta = Depends(get_client_meta),
    gate: QuotaGate = Depends(get_quota_gate),
):
    """
    Respostas:
    - 200: acesso registrado
    - 401: credenciais inválidas
    - 404: servidor não encontrado ou inativo
    - 429: limite mensal de listas ativas atingido
    """
    result = await gate.register_access(
        payload.server_code,
        payload.username,
        payload.password,
        meta,
    )

    return ClientAccessResponse(
        message="Acesso registrado com sucesso",
        period=result.period,
        first_access=result.first_access,
        user_info=result.user_info,
    )
