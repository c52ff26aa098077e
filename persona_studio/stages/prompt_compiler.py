"""
Prompt Compiler

Builds the self-contained instruction strings sent to the generation service:
- reference portraits from creation attributes
- studio shots from camera settings
- scene variants that must preserve the reference identity
- persona analysis and story planning instructions

All functions are pure: identical inputs always give identical text.
"""

from typing import Optional

from ..core.constants import STORY_FRAME_COUNT
from ..models import CameraSettings, CreatorAttributes, Persona

ROTATION_THRESHOLD = 10
VERTICAL_THRESHOLD = 0.3
EXTREME_CLOSE_UP_ZOOM = 7
MEDIUM_CLOSE_UP_ZOOM = 3


def compile_reference_prompt(attrs: CreatorAttributes) -> str:
    """Portrait description for generating a brand-new reference image."""
    return f"""
Generate a high-quality, photorealistic portrait of a virtual fashion model.

VISUAL ATTRIBUTES:
- Gender: {attrs.gender}
- Age Appearance: Approx {attrs.age} years old
- Ethnicity/Heritage: {attrs.ethnicity}
- Physique: {attrs.build} build, approx {attrs.height}cm tall
- Face: {attrs.eye_color} eyes, clear skin texture

HAIR & STYLE:
- Hair: {attrs.hair_color}, {attrs.hair_style}
- Fashion: {attrs.fashion_style}
- Vibe: {attrs.vibe}

COMPOSITION:
Professional studio photography, front-facing portrait or 3/4 view.
Neutral, soft-focus background.
Lighting: Cinematic studio lighting, 8k resolution, highly detailed.
""".strip()


def _format_degrees(value: float) -> str:
    return f"{value:g}"


def describe_camera(settings: CameraSettings) -> str:
    """
    Turn camera parameters into a natural-language shot description.

    Thresholds are strict: rotation of exactly +/-10 is still front facing,
    vertical of exactly +/-0.3 is eye level, zoom 7 is a medium close-up and
    zoom 3 is a full body shot.
    """
    if settings.rotation < -ROTATION_THRESHOLD:
        view = f"Profile view from the left ({_format_degrees(abs(settings.rotation))} degrees)"
    elif settings.rotation > ROTATION_THRESHOLD:
        view = f"Profile view from the right ({_format_degrees(settings.rotation)} degrees)"
    else:
        view = "Front facing view"

    if settings.vertical < -VERTICAL_THRESHOLD:
        angle = "Low angle shot (worm's eye view)"
    elif settings.vertical > VERTICAL_THRESHOLD:
        angle = "High angle shot (bird's eye view)"
    else:
        angle = "Eye-level shot"

    if settings.zoom > EXTREME_CLOSE_UP_ZOOM:
        framing = "Extreme close-up on face, detailed features"
    elif settings.zoom > MEDIUM_CLOSE_UP_ZOOM:
        framing = "Medium close-up (head and shoulders)"
    else:
        framing = "Full body shot"

    if settings.is_wide_angle:
        lens = "Shot with a wide-angle lens (16mm), slightly distorted perspective"
    else:
        lens = "Shot with a portrait lens (85mm)"

    return ", ".join([view, angle, framing, lens])


def compile_studio_prompt(persona: Persona, settings: CameraSettings) -> str:
    """Studio session prompt: camera setup plus the persona's identity fields."""
    return f"""
Studio photography session of {persona.nickname}.
Age: {persona.age}. Occupation: {persona.occupation}.
{persona.vibe} style.

CAMERA SETUP: {describe_camera(settings)}

The subject is posing professionally in a studio or clean aesthetic environment.
Lighting should be high-quality studio lighting.
""".strip()


def compile_scene_variant_prompt(persona: Optional[Persona], scene_text: str) -> str:
    """
    Wrap a scene description with the identity-preservation instruction.

    The wrapper is fixed; ``persona`` does not change the output.
    """
    return f"""
Generate a photorealistic influencer photo based on the reference person.

CRITICAL INSTRUCTION: Preserve the facial identity, hair, and body type of the reference image exactly.

SCENE DESCRIPTION: {scene_text}

STYLE: 4k, cinematic, social media aesthetic, high detail.
""".strip()


def compile_persona_analysis_prompt() -> str:
    # Persona profiles are written in Korean for the target audience
    return """
이 사진 속 인물의 시각적 특징을 깊이 분석하여 구체적인 "인플루언서 페르소나"를 설정해주세요.
응답은 반드시 **한국어(Korean)**로 작성해야 합니다.

다음 항목들을 상상력을 발휘하여 구체적으로 정의하세요:
1. **나이(Age)**: 대략적인 나이대 (예: 20대 중반, 30대 초반)
2. **직업(Occupation)**: 외모와 분위기에 어울리는 직업 (예: 피트니스 강사, 스타트업 CEO, 여행 작가)
3. **성격(Personality)**: 표정과 포즈에서 느껴지는 성격 (예: 자신감 넘치고 외향적, 차분하고 지적임)
4. **라이프스타일(Lifestyle)**: 즐길 것 같은 취미나 생활 방식 (예: 주말마다 서핑, 럭셔리 호텔 투어, 빈티지 카페 탐방)
5. **스타일(Vibe)**: 전반적인 패션 및 분위기 키워드
6. **별명(Nickname)**: 부르기 쉽고 기억에 남는 별명
7. **소개글(Description)**: 이 페르소나를 한 줄로 요약하는 문장 (15단어 이내)
8. **해시태그**: 관련 태그 3~4개
""".strip()


def compile_story_plan_prompt(
    persona: Persona,
    scenario: Optional[str] = None,
    frame_count: int = STORY_FRAME_COUNT,
) -> str:
    """Storyboard instruction asking for ``frame_count`` scene prompts."""
    if scenario and scenario.strip():
        scenario_line = f'SPECIFIC SCENARIO: The user wants the story to be about: "{scenario.strip()}".'
    else:
        scenario_line = (
            "SCENARIO: Create a trending, engaging lifestyle sequence that fits their Job and "
            "Lifestyle perfectly."
        )

    return f"""
We are creating a photo series ({frame_count} images) for a virtual influencer.

INFLUENCER PROFILE (Detailed Persona):
- Name: {persona.nickname}
- Age: {persona.age}
- Job: {persona.occupation}
- Personality: {persona.personality}
- Lifestyle: {persona.lifestyle}
- Vibe: {persona.vibe}

TASK:
Create a sequential {frame_count}-frame visual storyboard. The images should look like a cohesive story or a "day in the life" photo dump.
{scenario_line}

REQUIREMENTS:
- Return exactly {frame_count} distinct image prompts.
- **LOCATION CONSISTENCY (CRITICAL)**: The background and location MUST remain consistent across all {frame_count} frames.
- Each prompt must describe the outfit, background, action, and lighting.
- Keep the outfit relatively consistent within the story.
""".strip()
