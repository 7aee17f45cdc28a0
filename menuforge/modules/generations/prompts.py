from menuforge.config.style_catalog import (
    describe_theme, describe_font_style, describe_layout, describe_size
)
from menuforge.modules.generations.schemas import GenerateRequest


SYSTEM_PROMPT_TEMPLATE = """You are an expert HTML/CSS designer specializing in restaurant menus. Create a complete, standalone HTML file with embedded CSS that displays a beautiful, professional menu.

Requirements:
- Complete HTML document with <!DOCTYPE html>, proper structure
- All CSS must be embedded in <style> tags
- Use this color palette: {colors}
- Target page size: {size}
- Make it print-ready with @media print styles
- Use elegant typography (Google Fonts via @import recommended)
- Use proper spacing and visual hierarchy
- Organize menu items clearly with sections (Appetizers, Main Courses, Desserts, Drinks, etc.)
- Make text elements easy to identify for editing (use semantic tags like h1, h2, h3, p, span)
- NO JavaScript
- Professional, restaurant-quality design
- Ensure the design looks beautiful when printed as PDF
{style_lines}
IMPORTANT: Output ONLY the raw HTML code. Do NOT wrap it in markdown code blocks or add any explanations. Start directly with <!DOCTYPE html> and end with </html>."""

USER_PROMPT_TEMPLATE = """Create a stunning HTML restaurant menu design based on the specifications above.

Menu Content:
{menu_text}

Create a complete HTML file that:
1. Opens directly in a browser
2. Prints beautifully as PDF
3. Follows the visual theme and style specifications exactly
4. {header_line}
5. Organizes menu items into clear sections
6. Uses the specified color palette throughout
7. Applies the typography style consistently

Make it absolutely beautiful and suitable for a real upscale restaurant."""


def _style_lines(request: GenerateRequest) -> list[str]:
    lines = []
    if request.restaurant_name:
        lines.append(f'Restaurant Name: "{request.restaurant_name}" - Display prominently in the header')
    if request.slogan:
        lines.append(f'Slogan/Tagline: "{request.slogan}" - Display under the restaurant name')
    if request.themes:
        lines.append("Visual Themes to blend: " + "; ".join(describe_theme(t) for t in request.themes))
    if request.custom_theme_description:
        lines.append(f"Custom style elements: {request.custom_theme_description}")
    if request.font_style:
        lines.append(f"Typography Style: {describe_font_style(request.font_style)}")
    if request.layout:
        lines.append(f"Page Layout: {describe_layout(request.layout)}")
    if request.general_description:
        lines.append(f"Additional requirements: {request.general_description}")
    if request.style_prompt:
        lines.append(f"Extra notes: {request.style_prompt}")
    return lines


def build_system_prompt(request: GenerateRequest) -> str:
    lines = _style_lines(request)
    style_block = "\n" + "\n".join(lines) + "\n" if lines else ""
    return SYSTEM_PROMPT_TEMPLATE.format(
        colors=", ".join(request.colors),
        size=describe_size(request.size),
        style_lines=style_block,
    )


def build_user_prompt(request: GenerateRequest) -> str:
    if request.restaurant_name:
        header_line = f'Has a professional header with the restaurant name "{request.restaurant_name}"'
        if request.slogan:
            header_line += f' and slogan "{request.slogan}"'
    else:
        header_line = "Has a clean header area"
    return USER_PROMPT_TEMPLATE.format(menu_text=request.menu_text, header_line=header_line)
