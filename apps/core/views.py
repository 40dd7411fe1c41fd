# apps/core/views.py

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.board.serializers import serializar_usuario

from .auth_service import EmailJaCadastrado, auth_service
from .forms import PerfilForm
from .models import Usuario
from .permissions import api_login_required
from .utils import api_view, erro_json, ler_json


@csrf_exempt
@require_http_methods(['POST'])
@api_view
def register_view(request):
    """
    Registro de usuário

    Delega validação e criação para o serviço encapsulado; a resposta
    já traz o token para o cliente entrar direto.
    """
    dados = ler_json(request)
    try:
        usuario, token = auth_service.registrar(
            dados.get('name'),
            dados.get('email'),
            dados.get('password'),
        )
    except EmailJaCadastrado as exc:
        return erro_json(str(exc), status=409)

    return JsonResponse({'token': token, 'user': serializar_usuario(usuario)}, status=201)


@csrf_exempt
@require_http_methods(['POST'])
@api_view
def login_view(request):
    dados = ler_json(request)
    usuario, token = auth_service.fazer_login(dados.get('email'), dados.get('password'))

    if usuario is None:
        return erro_json('Invalid credentials', status=401)

    return JsonResponse({'token': token, 'user': serializar_usuario(usuario)})


@csrf_exempt
@require_http_methods(['POST'])
@api_login_required
def logout_view(request):
    """Revoga o token usado na requisição"""
    token = getattr(request, 'auth_token', None)
    if token:
        auth_service.revogar_token(token)
    return JsonResponse({'success': True})


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@api_login_required
@api_view
def me_view(request):
    """
    GET: dados do usuário autenticado
    POST: atualiza nome e/ou avatar (multipart)
    """
    if request.method == 'POST':
        form = PerfilForm(request.POST, request.FILES, instance=request.user)
        if not form.is_valid():
            raise ValidationError([erro for erros in form.errors.values() for erro in erros])
        usuario = form.save()
        return JsonResponse(serializar_usuario(usuario))

    return JsonResponse(serializar_usuario(request.user))


@require_http_methods(['GET'])
def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        Usuario.objects.exists()

        # Verificar cache (Redis em produção)
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        status = {
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status)

    except Exception as e:
        status = {
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
        }

        return JsonResponse(status, status=500)
