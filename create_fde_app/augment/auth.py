"""Authentication augmentations: NextAuth.js, Auth0 and AWS Cognito."""

from __future__ import annotations

from pathlib import Path

from ..templates import TemplateRenderer
from ..utils import print_info, print_step_header
from .base import FileSpec, Recipe, UnknownAugmentationError, apply_recipe


NEXTAUTH_ENV = """
# NextAuth.js Configuration
NEXTAUTH_URL=http://localhost:3000
NEXTAUTH_SECRET=

# OAuth Providers
GITHUB_ID=
GITHUB_SECRET=

GOOGLE_CLIENT_ID=
GOOGLE_CLIENT_SECRET=
"""

AUTH0_ENV = """
# Auth0 Configuration
AUTH0_SECRET='use-a-long-random-string'
AUTH0_BASE_URL='http://localhost:3000'
AUTH0_ISSUER_BASE_URL='https://YOUR_DOMAIN.auth0.com'
AUTH0_CLIENT_ID='your-client-id'
AUTH0_CLIENT_SECRET='your-client-secret'
AUTH0_SCOPE='openid profile email'
"""

# Client-side variable prefix each framework exposes to the browser.
PUBLIC_ENV_PREFIX: dict[str, str] = {
    "nextjs": "NEXT_PUBLIC_",
    "nuxtjs": "NUXT_PUBLIC_",
    "remix": "",
}

AUTH0_PACKAGES: dict[str, list[str]] = {
    "nextjs": ["@auth0/nextjs-auth0"],
    "nuxtjs": ["@auth0/auth0-vue"],
    "remix": ["remix-auth", "remix-auth-auth0"],
}


def nextauth_recipe(project_path: Path) -> Recipe:
    use_prisma = (project_path / "prisma").is_dir()
    dependencies = ["next-auth"]
    if use_prisma:
        dependencies.append("@auth/prisma-adapter")
    return Recipe(
        name="NextAuth.js",
        dependencies=dependencies,
        files=[
            FileSpec("auth/nextauth-options.ts.j2", "lib/auth/options.ts"),
            FileSpec(
                "auth/nextauth-route.ts.j2", "app/api/auth/[...nextauth]/route.ts"
            ),
            FileSpec("auth/nextauth-middleware.ts.j2", "middleware.ts"),
        ],
        env_marker="NEXTAUTH_URL",
        env_block=NEXTAUTH_ENV,
        frameworks=("nextjs",),
        next_steps=[
            "Generate NEXTAUTH_SECRET with `openssl rand -base64 32`",
            "Configure your OAuth providers in .env",
        ],
        context={"use_prisma": use_prisma},
    )


def auth0_recipe(framework: str) -> Recipe:
    return Recipe(
        name="Auth0",
        dependencies=AUTH0_PACKAGES.get(framework, ["@auth0/auth0-react"]),
        files=[
            FileSpec(
                "auth/auth0-nextjs-route.ts.j2",
                "app/api/auth/[auth0]/route.ts",
                frameworks=("nextjs",),
            ),
            FileSpec(
                "auth/auth0-nextjs-middleware.ts.j2",
                "middleware.ts",
                frameworks=("nextjs",),
            ),
            FileSpec(
                "auth/auth0-nuxt-plugin.ts.j2",
                "plugins/auth0.client.ts",
                frameworks=("nuxtjs",),
            ),
            FileSpec(
                "auth/auth0-remix-session.server.ts.j2",
                "app/services/session.server.ts",
                frameworks=("remix",),
            ),
            FileSpec(
                "auth/auth0-remix-auth.server.ts.j2",
                "app/services/auth.server.ts",
                frameworks=("remix",),
            ),
        ],
        env_marker="AUTH0_SECRET",
        env_block=AUTH0_ENV,
        next_steps=[
            "Create an application in the Auth0 dashboard",
            "Copy its domain, client ID and secret into .env",
        ],
    )


def cognito_recipe(framework: str) -> Recipe:
    prefix = PUBLIC_ENV_PREFIX.get(framework, "")
    env_block = (
        "\n# AWS Cognito Configuration\n"
        f"{prefix}COGNITO_USER_POOL_ID=\n"
        f"{prefix}COGNITO_CLIENT_ID=\n"
        f"{prefix}COGNITO_IDENTITY_POOL_ID=\n"
        f"{prefix}COGNITO_DOMAIN=\n"
        f"{prefix}REDIRECT_SIGN_IN=http://localhost:3000/\n"
        f"{prefix}REDIRECT_SIGN_OUT=http://localhost:3000/\n"
        f"{prefix}AWS_REGION=us-east-1\n"
    )
    dependencies = ["aws-amplify"]
    if framework != "nuxtjs":
        dependencies.append("@aws-amplify/ui-react")
    return Recipe(
        name="AWS Cognito",
        dependencies=dependencies,
        files=[
            FileSpec("auth/amplify.ts.j2", "lib/config/amplify.ts"),
            FileSpec("auth/cognito-utils.ts.j2", "lib/auth/cognito-utils.ts"),
        ],
        env_marker=f"{prefix}COGNITO_USER_POOL_ID",
        env_block=env_block,
        next_steps=[
            "Create a Cognito user pool and app client",
            "Fill in the Cognito variables in .env",
        ],
        context={"env_prefix": prefix},
    )


AUTH_PROVIDERS = ("nextauth", "auth0", "cognito")


async def setup_auth(
    project_path: str | Path,
    framework: str,
    provider: str,
    *,
    install: bool = True,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Add the authentication *provider* to the project.

    Raises:
        UnknownAugmentationError: If *provider* is not in :data:`AUTH_PROVIDERS`.
        AugmentationError: NextAuth.js on a framework other than Next.js.
    """
    root = Path(project_path)
    if provider == "nextauth":
        recipe = nextauth_recipe(root)
        if recipe.context["use_prisma"]:
            print_info("Prisma detected, configuring the Prisma adapter")
    elif provider == "auth0":
        recipe = auth0_recipe(framework)
    elif provider == "cognito":
        recipe = cognito_recipe(framework)
    else:
        raise UnknownAugmentationError("auth", provider, list(AUTH_PROVIDERS))

    print_step_header(f"Setting up {recipe.name} authentication")
    return await apply_recipe(recipe, root, framework, install=install, renderer=renderer)
