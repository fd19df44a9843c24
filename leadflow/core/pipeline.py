"""Pipeline definition and stage navigation"""
from typing import Dict, List, Optional

from leadflow.models import (
    StageClass, CloseOutcome, TemperatureHint, StageDescriptor, PipelineConfig
)


DEFAULT_STAGES: List[StageDescriptor] = [
    StageDescriptor(
        id="nuevo",
        order=1,
        name="Nuevo",
        objective="Obtener la primera respuesta del lead.",
        recommended_action="Enviar el primer mensaje base ofreciendo el video corto.",
        advance_criterion="El lead responde cualquier mensaje (cualquier tipo de respuesta).",
        recommended_message=(
            "Hola, ¿cómo estás? Soy Mario de MiWebYa.\n"
            "Vi tu negocio y noté varias oportunidades para mejorar tu presencia en Google.\n"
            "¿Te gustaría que te muestre cómo podemos ayudarte?"
        ),
        temperature_hint=TemperatureHint.COLD,
    ),
    StageDescriptor(
        id="respondio",
        order=2,
        name="Respondió",
        objective="Transformar la respuesta en algo concreto (video o demo).",
        recommended_action="Ofrecer explícitamente enviar un video o una mini demo.",
        advance_criterion="Se envía el video al lead.",
        recommended_message=(
            "Genial! Te preparé un video corto (2 min) mostrando exactamente qué "
            "mejoraríamos en tu presencia online.\n¿Te lo mando?"
        ),
        temperature_hint=TemperatureHint.WARM,
    ),
    StageDescriptor(
        id="video_enviado",
        order=3,
        name="Video Enviado",
        objective="Conseguir que vea el video y abra la conversación hacia una demo.",
        recommended_action=(
            "Enviar mensaje corto de seguimiento preguntando si lo vio y "
            "ofreciendo una demo de 5 minutos."
        ),
        advance_criterion="Se ofrece formalmente la demo mediante un mensaje enviado desde el CRM.",
        temperature_hint=TemperatureHint.WARM_IF_INCOMING,
    ),
    StageDescriptor(
        id="demo_ofrecida",
        order=4,
        name="Demo Ofrecida",
        objective="Cerrar una fecha y hora para la demo.",
        recommended_action="Preguntar qué día/hora le acomoda más para la demo.",
        advance_criterion="El lead confirma un horario y se agenda la demo.",
        recommended_message=(
            "¿Qué te pareció? Si quieres, podemos agendar una llamada de 15 min "
            "para mostrarte ejemplos en vivo y responder tus dudas."
        ),
        temperature_hint=TemperatureHint.WARM,
    ),
    StageDescriptor(
        id="demo_agendada",
        order=5,
        name="Demo Agendada",
        objective="Que la demo efectivamente ocurra.",
        recommended_action="Enviar recordatorio el mismo día y tener el demo listo.",
        advance_criterion="La demo se realiza, aunque sea breve.",
        temperature_hint=TemperatureHint.HOT,
    ),
    StageDescriptor(
        id="demo_realizada",
        order=6,
        name="Demo Realizada",
        objective="Convertir el interés del lead en una oferta clara.",
        recommended_action="Enviar resumen de lo visto y la oferta (plan + precio + CTA).",
        advance_criterion="Se envía la oferta formal al lead.",
        recommended_message=(
            "Gracias por tu tiempo en la llamada! Te envío la propuesta con los "
            "detalles que conversamos.\n¿Cuándo podemos confirmar para arrancar?"
        ),
        temperature_hint=TemperatureHint.HOT,
    ),
    StageDescriptor(
        id="oferta_enviada",
        order=7,
        name="Oferta Enviada",
        objective="Obtener sí / no / cuándo.",
        recommended_action=(
            "Enviar follow-up corto preguntando qué le pareció la propuesta y "
            "si quiere avanzar esta semana."
        ),
        advance_criterion=(
            "Pasa a Cierre Ganado cuando acepta o paga; pasa a Cierre Perdido "
            "cuando dice que no o no responde después de varios intentos."
        ),
        temperature_hint=TemperatureHint.HOT,
    ),
    StageDescriptor(
        id="follow_up",
        order=8,
        name="Follow Up",
        objective="Reactivar leads que dejaron de responder.",
        recommended_action="Enviar mensaje de seguimiento sin ser invasivo.",
        advance_criterion="El lead retoma la conversación (vuelve a etapa anterior).",
        recommended_message=(
            "Hola! ¿Cómo va todo? Quería hacer seguimiento de nuestra conversación "
            "anterior.\n¿Tuviste tiempo de pensarlo?"
        ),
        stage_class=StageClass.AUXILIARY,
    ),
    StageDescriptor(
        id="cierre_ganado",
        order=9,
        name="Cierre Ganado",
        objective="Formalizar inicio y entregar rápido.",
        recommended_action=(
            "Enviar mensaje de bienvenida con los siguientes pasos "
            "(formulario, datos, fecha de entrega)."
        ),
        advance_criterion="No avanza; es estado final de éxito.",
        stage_class=StageClass.TERMINAL,
        outcome=CloseOutcome.WON,
    ),
    StageDescriptor(
        id="cierre_perdido",
        order=10,
        name="Cierre Perdido",
        objective="Cerrar el ciclo sin fricción.",
        recommended_action="Enviar mensaje de agradecimiento dejando abierta la puerta para el futuro.",
        advance_criterion="No avanza; es estado final de cierre.",
        stage_class=StageClass.TERMINAL,
        outcome=CloseOutcome.LOST,
    ),
]


def default_pipeline_config() -> PipelineConfig:
    """Fresh copy of the built-in pipeline"""
    return PipelineConfig(stages=[s.model_copy() for s in DEFAULT_STAGES])


# Historical stage ids -> canonical ids
LEGACY_STAGE_IDS: Dict[str, str] = {
    # camelCase scheme
    "videoEnviado": "video_enviado",
    "demoOfrecida": "demo_ofrecida",
    "demoAgendada": "demo_agendada",
    "demoRealizada": "demo_realizada",
    "ofertaEnviada": "oferta_enviada",
    "cierreGanado": "cierre_ganado",
    "cierrePerdido": "cierre_perdido",
    "followUp": "follow_up",
    # V3 scheme
    "contacto_inicial": "nuevo",
    "valor_entregado": "video_enviado",
    "interaccion_activa": "demo_ofrecida",
    "demo_evaluacion": "demo_realizada",
    "win": "cierre_ganado",
    "lost": "cierre_perdido",
}


def migrate_stage_id(stage_id: Optional[str]) -> Optional[str]:
    """Map a historical stage id to its canonical id; unknown ids pass through"""
    if stage_id is None:
        return None
    return LEGACY_STAGE_IDS.get(stage_id, stage_id)


# ===========================================
# NAVIGATION
# ===========================================

def main_sequence(config: PipelineConfig) -> List[StageDescriptor]:
    """Main stages in configured order"""
    main = [s for s in config.stages if s.stage_class == StageClass.MAIN]
    return sorted(main, key=lambda s: s.order)


def first_stage(config: PipelineConfig) -> StageDescriptor:
    """Entry stage for new leads"""
    return main_sequence(config)[0]


def auxiliary_stage(config: PipelineConfig) -> StageDescriptor:
    """The single parking stage (follow-up)"""
    return next(s for s in config.stages if s.stage_class == StageClass.AUXILIARY)


def terminal_stage(config: PipelineConfig, outcome: CloseOutcome) -> StageDescriptor:
    """Terminal stage carrying the given outcome"""
    return next(s for s in config.stages if s.outcome == outcome)


def stage_of(config: PipelineConfig, stage_id: str) -> Optional[StageDescriptor]:
    """Stage descriptor by id, None when the id is not configured"""
    for stage in config.stages:
        if stage.id == stage_id:
            return stage
    return None


def class_of(config: PipelineConfig, stage_id: str) -> Optional[StageClass]:
    """Stage class, None for unknown ids"""
    stage = stage_of(config, stage_id)
    return stage.stage_class if stage else None


def is_terminal(config: PipelineConfig, stage_id: str) -> bool:
    """Won or lost stage"""
    return class_of(config, stage_id) == StageClass.TERMINAL


def is_auxiliary(config: PipelineConfig, stage_id: str) -> bool:
    """Follow-up stage"""
    return class_of(config, stage_id) == StageClass.AUXILIARY


def _main_index(config: PipelineConfig, stage_id: str) -> int:
    for i, stage in enumerate(main_sequence(config)):
        if stage.id == stage_id:
            return i
    return -1


def next_of(config: PipelineConfig, stage_id: str) -> Optional[StageDescriptor]:
    """
    Successor in the main sequence.

    None for the last main stage, the auxiliary stage, terminal stages and
    unknown ids. Terminal stages are only reached by closing a lead.
    """
    index = _main_index(config, stage_id)
    sequence = main_sequence(config)
    if index < 0 or index + 1 >= len(sequence):
        return None
    return sequence[index + 1]


def previous_of(config: PipelineConfig, stage_id: str) -> Optional[StageDescriptor]:
    """Main stage immediately before stage_id, None for the first stage"""
    index = _main_index(config, stage_id)
    if index <= 0:
        return None
    return main_sequence(config)[index - 1]


def stage_name(config: PipelineConfig, stage_id: str) -> str:
    """Display name, falling back to the raw id for dangling stages"""
    stage = stage_of(config, stage_id)
    return stage.name if stage else stage_id


def progress_percent(config: PipelineConfig, stage_id: str) -> int:
    """Position in the main sequence as a percentage; won counts as 100"""
    index = _main_index(config, stage_id)
    if index >= 0:
        return round((index + 1) / len(main_sequence(config)) * 100)
    stage = stage_of(config, stage_id)
    if stage and stage.outcome == CloseOutcome.WON:
        return 100
    return 0
