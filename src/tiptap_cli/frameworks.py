"""Supported frontend frameworks."""

from enum import StrEnum

DOCS_URL = "https://tiptap.dev/docs/ui-components/getting-started/overview"


class Framework(StrEnum):
    """Framework detected in a consumer project."""

    NEXT_APP = "next-app"
    NEXT_PAGES = "next-pages"
    REMIX = "remix"
    REACT_ROUTER = "react-router"
    VITE = "vite"
    ASTRO = "astro"
    LARAVEL = "laravel"
    TANSTACK_START = "tanstack-start"
    GATSBY = "gatsby"
    MANUAL = "manual"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def installation_url(self) -> str:
        slug = {
            Framework.NEXT_APP: "next",
            Framework.NEXT_PAGES: "next",
            Framework.TANSTACK_START: "tanstack",
        }.get(self, self.value)
        return f"{DOCS_URL}/installation/{slug}"

    @property
    def is_next(self) -> bool:
        return self in (Framework.NEXT_APP, Framework.NEXT_PAGES)


_LABELS: dict[Framework, str] = {
    Framework.NEXT_APP: "Next.js",
    Framework.NEXT_PAGES: "Next.js",
    Framework.REMIX: "Remix",
    Framework.REACT_ROUTER: "React Router",
    Framework.VITE: "Vite",
    Framework.ASTRO: "Astro",
    Framework.LARAVEL: "Laravel",
    Framework.TANSTACK_START: "TanStack Start",
    Framework.GATSBY: "Gatsby",
    Framework.MANUAL: "Manual",
}


class NewProjectFramework(StrEnum):
    """Framework offered when bootstrapping an empty directory."""

    NEXT = "next"
    VITE = "vite"
