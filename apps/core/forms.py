# apps/core/forms.py

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from .models import Usuario


class PerfilForm(forms.ModelForm):
    """
    Atualização do perfil pela API (POST /api/me)

    Aceita multipart com `name` e/ou o arquivo `avatar`. Campos ausentes
    mantêm o valor atual.
    """

    name = forms.CharField(max_length=150, required=False)

    class Meta:
        model = Usuario
        fields = ['avatar']

    def clean_name(self):
        nome = (self.cleaned_data.get('name') or '').strip()
        if 'name' in self.data and not nome:
            raise ValidationError("Name cannot be empty")
        return nome

    def clean_avatar(self):
        """Limita o tamanho do upload (a imagem em si é validada pelo Pillow)"""
        avatar = self.cleaned_data.get('avatar')
        limite = int(getattr(settings, 'KANBAN_AVATAR_MAX_UPLOAD', 5 * 1024 * 1024))
        if avatar and getattr(avatar, 'size', 0) > limite:
            raise ValidationError("Avatar file too large")
        return avatar

    def save(self, commit=True):
        usuario = super().save(commit=False)
        if self.cleaned_data.get('name'):
            usuario.nome = self.cleaned_data['name']
        if commit:
            usuario.save()
        return usuario
