from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from screening.moderation.services.config import ProviderConfig


class ProviderAdapter(ABC):
    """
    Interface abstrata para provedores externos de moderação (IA).

    Cada implementação conhece apenas o envelope do seu provedor: URL, formato
    do header de autenticação, corpo da requisição e o caminho do texto na
    resposta. A interpretação do texto fica com o ResponseParser, então trocar
    ou adicionar um provedor não afeta o gateway.

    Contrato:
    - respeitar `config.timeout_s`;
    - levantar ProviderHTTPError para qualquer resposta sem sucesso, timeout ou
      erro de transporte;
    - devolver a resposta livre do modelo sem modificá-la.
    """

    name: str = ""

    def __init__(self, http_client=None):
        self.http_client = http_client

    @abstractmethod
    def call(self, prompt: str, is_image: bool, config: "ProviderConfig", content: str | None = None) -> str:
        """
        Envia o prompt normalizado ao provedor.

        Args:
            prompt: Instrução já montada (texto ou imagem em base64 embutida)
            is_image: Se o prompt carrega uma imagem
            config: Configuração estática do provedor
            content: Conteúdo original sem a instrução (provedores offline)

        Returns:
            Texto bruto da resposta do modelo
        """

    def is_configured(self, config: "ProviderConfig") -> bool:
        """Credenciais mínimas presentes (checado antes de qualquer I/O)."""
        return True

    def get_provider_name(self) -> str:
        return self.name
