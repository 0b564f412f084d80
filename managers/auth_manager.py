from fastapi import HTTPException, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import List, Optional, Literal, Any
from typing import TypedDict, cast
from jwt.algorithms import RSAAlgorithm
import jwt
import requests
import os
import logging

logger = logging.getLogger(__name__)


class JWKKey(TypedDict):
    kty: str
    use: str
    kid: str
    x5t: str
    n: str
    e: str
    x5c: List[str]
    cloud_instance_name: str
    issuer: str


class JWTPayload(TypedDict, total=False):
    sub: str
    name: str
    oid: str
    azp: str
    scp: str
    roles: List[str]
    exp: int
    nbf: int
    iat: int
    iss: str
    aud: str


class AuthManager:
    _instance: Optional["AuthManager"] = None
    jwt_keys: List[JWKKey] = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.jwt_keys = cls._instance._get_jwt_keys()
        return cls._instance

    def _tenant_id(self) -> str:
        tenant_id = os.getenv("AZURE_B2C_TENANT_ID")
        if not tenant_id:
            raise ValueError("AZURE_B2C_TENANT_ID環境変数が設定されていません")
        return tenant_id

    def _get_jwt_keys(self) -> List[JWKKey]:
        """JWTの検証キーをMicrosoft Entra External IDから取得する"""
        try:
            tenant_id = self._tenant_id()
            openid_config_url = f"https://{tenant_id}.ciamlogin.com/{tenant_id}/v2.0/.well-known/openid-configuration"

            config_response = requests.get(openid_config_url, timeout=10)
            config_response.raise_for_status()
            jwks_uri = config_response.json().get("jwks_uri")
            if not jwks_uri:
                raise ValueError("OpenID設定にjwks_uriが見つかりません")

            keys_response = requests.get(jwks_uri, timeout=10)
            keys_response.raise_for_status()

            return cast(List[JWKKey], keys_response.json()["keys"])

        except requests.exceptions.RequestException as e:
            raise ValueError(f"JWT検証キーの取得に失敗しました: {e}")

    def reload_jwt_keys(self) -> None:
        self.jwt_keys = self._get_jwt_keys()

    def get_signing_key(self, jwt_token: str) -> Any:
        header = jwt.get_unverified_header(jwt_token)

        for key in self.jwt_keys:
            if key.get("kid") == header.get("kid"):
                jwk = {
                    "kty": key.get("kty"),
                    "kid": key.get("kid"),
                    "use": key.get("use"),
                    "n": key.get("n"),
                    "e": key.get("e"),
                }
                return RSAAlgorithm.from_jwk(jwk)

        logger.warning("Signing key %s not in %s", header.get("kid"), [key.get("kid") for key in self.jwt_keys])
        raise ValueError(f"署名キーが見つかりません。kid: {header.get('kid')}")

    def verify_jwt_token(self, jwt_token: str) -> JWTPayload:
        def try_decode(keys_reloaded: bool = False) -> JWTPayload:
            try:
                signing_key = self.get_signing_key(jwt_token)
                tenant_id = self._tenant_id()

                decoded = jwt.decode(
                    jwt_token,
                    signing_key,
                    audience=os.getenv("AZURE_API_APP_ID"),
                    issuer=f"https://{tenant_id}.ciamlogin.com/{tenant_id}/v2.0",
                    algorithms=["RS256"],
                )

                return cast(JWTPayload, decoded)

            except jwt.exceptions.InvalidTokenError as e:
                logger.warning("Token validation error: %s", e)
                if not keys_reloaded:
                    self.reload_jwt_keys()
                    return try_decode(keys_reloaded=True)
                raise HTTPException(
                    status_code=401,
                    detail=f"不正なIDトークンです: {str(e)}",
                    headers={"WWW-Authenticate": "Bearer"},
                )

        return try_decode()


security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> JWTPayload:
    """トークンを検証して呼び出し元の情報を取得"""
    try:
        auth_manager = AuthManager()
        return auth_manager.verify_jwt_token(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=401,
            detail=f"認証エラー: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


Scope = Literal[
    "products.read",
    "products.write",
]


def requires_scope(required_scope: Scope):
    """特定のスコープが必要なエンドポイント用の依存関数"""

    def scope_validator(token_data: JWTPayload = Depends(get_current_user)):
        local_client_id = os.getenv("AZURE_LOCAL_CLIENT_APP_ID")
        if local_client_id and token_data.get("azp", "") == local_client_id:
            return token_data
        scopes = token_data.get("scp", "").split()
        if required_scope not in scopes:
            raise HTTPException(
                status_code=403,
                detail=f"アクセス権限がありません。必要なスコープ: {required_scope}",
            )
        return token_data

    return scope_validator
