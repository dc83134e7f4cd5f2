"""Reverse geocoding using OSM Nominatim API."""

import time
import asyncio
import logging
import threading
import requests
from typing import Any, Dict

from .config import (
    NOMINATIM_API_URL, NOMINATIM_RATE_LIMIT_SECONDS, NOMINATIM_TIMEOUT,
    NOMINATIM_USER_AGENT, NOMINATIM_ZOOM, LANGUAGE,
)
from .errors import NetworkError

logger = logging.getLogger(__name__)


class NominatimClient:
    """HTTP client for the Nominatim /reverse endpoint."""

    def __init__(
        self,
        api_url: str = NOMINATIM_API_URL,
        timeout: float = NOMINATIM_TIMEOUT,
        rate_limit_seconds: float = NOMINATIM_RATE_LIMIT_SECONDS,
        language: str = LANGUAGE,
        user_agent: str = NOMINATIM_USER_AGENT,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.rate_limit_seconds = rate_limit_seconds
        self.language = language
        self.user_agent = user_agent
        self.last_request_time = 0.0
        self._lock = threading.Lock()

    def reverse(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Reverse geocode coordinates to the raw Nominatim payload.

        Blocking call. Returns the decoded JSON, which carries an "address"
        object (road, suburb/neighbourhood, city/town, state, country,
        postcode, ...) and a "display_name" string.

        Args:
            lat: Latitude coordinate
            lon: Longitude coordinate

        Returns:
            Decoded JSON payload

        Raises:
            NetworkError: non-200 response, timeout, connection failure,
                undecodable body or a Nominatim "error" body.

        Note:
            Respects Nominatim rate limiting (max 1 request per second).
        """
        with self._lock:
            # Rate limiting
            now = time.time()
            time_since_last = now - self.last_request_time
            if time_since_last < self.rate_limit_seconds:
                sleep_time = self.rate_limit_seconds - time_since_last
                logger.debug(f"Geocoding rate limiting: sleeping {sleep_time:.1f}s")
                time.sleep(sleep_time)
            self.last_request_time = time.time()

        params = {
            "format": "json",
            "lat": lat,
            "lon": lon,
            "zoom": NOMINATIM_ZOOM,
            "addressdetails": 1,
            "accept-language": self.language,
        }

        logger.debug(f"Reverse geocoding: ({lat}, {lon})")

        try:
            response = requests.get(
                self.api_url,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},  # Required by Nominatim
            )
        except requests.exceptions.Timeout:
            logger.warning("Geocoding API timeout")
            raise NetworkError("Tempo esgotado ao consultar o serviço de geocodificação")
        except requests.exceptions.ConnectionError:
            logger.warning("Geocoding API connection error")
            raise NetworkError("Não foi possível acessar o serviço de geocodificação")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Geocoding API request failed: {e}")
            raise NetworkError(f"Falha ao buscar endereço: {e}")

        if response.status_code != 200:
            message = self._describe_status(response.status_code, response.text)
            logger.warning(f"Geocoding API error {response.status_code}: {response.text[:100]}")
            raise NetworkError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Geocoding API returned invalid JSON: {response.text[:100]}")
            raise NetworkError("Resposta inválida do serviço de geocodificação", status_code=200)

        if not isinstance(data, dict):
            raise NetworkError("Resposta inválida do serviço de geocodificação", status_code=200)
        if "error" in data:
            logger.warning(f"Geocoding API error body: {data['error']}")
            raise NetworkError(f"Endereço não encontrado: {data['error']}", status_code=200)

        logger.debug(f"Geocoded address: {data.get('display_name')}")
        return data

    async def fetch(self, lat: float, lon: float) -> Dict[str, Any]:
        """Run reverse() in the loop's default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.reverse, lat, lon)

    def _describe_status(self, status_code: int, response_text: str) -> str:
        """
        Map a Nominatim error status to a user-friendly message.

        Returns:
            Human-readable error message
        """
        if status_code == 400:
            return "Solicitação inválida (coordenadas incorretas)"
        elif status_code == 403:
            return "Acesso negado pelo serviço de geocodificação"
        elif status_code == 425:
            return "Serviço temporariamente indisponível. Tente novamente em alguns segundos."
        elif status_code == 429:
            return "Limite de requisições atingido. Aguarde alguns segundos e tente novamente."
        elif status_code >= 500:
            return f"Erro do servidor de geocodificação ({status_code})"
        return f"Erro HTTP {status_code}: {response_text[:100]}" if response_text else f"Erro HTTP {status_code}"
