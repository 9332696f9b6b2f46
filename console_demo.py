"""
Offline console demo: chat with the lead-capture bot in the terminal.

Runs the real extraction, classification, and response pipeline against
the bundled demo catalog (or a JSON knowledge base). No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario lead
    python console_demo.py --scenario faq --seed 7
    python console_demo.py --kb path/to/knowledge_base.json
"""

import argparse
import random
import sys
from typing import Optional

from lead_chatbot.config import settings
from lead_chatbot.conversation.conversation_manager import ConversationManager
from lead_chatbot.conversation.response_generator import ResponseGenerator
from lead_chatbot.knowledge.catalog import KnowledgeBaseLoadError, get_knowledge_base
from lead_chatbot.schemas.knowledge_schema import KnowledgeBaseContext
from lead_chatbot.schemas.lead_schema import LeadData

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """One chat session rendered in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "lead": [
            "Oi",
            "Vocês vendem portões?",
            "Quanto custa?",
            "Meu nome é João Silva, (11) 98765-4321, joao@email.com",
            "Obrigado, tchau!",
        ],
        "faq": [
            "Bom dia",
            "Qual o horário de atendimento?",
            "Quais as formas de pagamento?",
            "Onde vocês ficam?",
        ],
        "budget": [
            "Quero um orçamento de grade para janela",
            "Maria aqui",
            "Tenho uns 5 mil, preciso para dezembro",
            "Sou de Campinas, SP",
            "Meu zap é 11 91234-5678",
        ],
        "confused": [
            "asdfasdf",
            "???",
            "hmm",
            "qwerty",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, knowledge_base: KnowledgeBaseContext, seed: Optional[int] = None) -> None:
        rng = random.Random(seed if seed is not None else settings.response.random_seed)
        self.manager = ConversationManager(
            knowledge_base, generator=ResponseGenerator(rng=rng)
        )
        self.lead = LeadData(source="console")
        self.company_name = (
            knowledge_base.company_data.name if knowledge_base.company_data else settings.business.name
        )

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Bot]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  LEAD CHATBOT - {title}{RESET}")
        print(f"{BOLD}  Empresa: {self.company_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        self.bot_say(self.manager.generate_greeting())
        for step in steps:
            print(f"\n{BLUE}[Cliente] {RESET}{step}")
            self._process_input(step)
        self._summary()

    def run(self) -> None:
        self._banner("Interactive mode")
        print(f"{DIM}  Type 'sair' to quit.{RESET}\n")
        self.bot_say(self.manager.generate_greeting())

        while True:
            try:
                user_input = input(f"\n{BLUE}[Cliente] {RESET}").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not user_input:
                continue
            if user_input.lower() in ("sair", "quit", "exit"):
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                print(f"{YELLOW}  Mensagem muito longa, truncando.{RESET}")
                user_input = user_input[: self.MAX_INPUT_LENGTH]
            self._process_input(user_input)

        self._summary()

    def _process_input(self, text: str) -> None:
        result = self.manager.process_message(text, self.lead)
        self.lead = result.updated_lead_data
        self.bot_say(result.response)
        self.system_log(f"Intent: {result.intent.id} (confidence {result.confidence:.2f})")
        if result.captured_data:
            self.system_log(f"Captured: {result.captured_data}")

        follow_up = self.manager.should_follow_up(self.lead)
        if follow_up.should_follow_up:
            self.system_log(f"Follow-up suggestion: {follow_up.message}")

    def _summary(self) -> None:
        state = self.manager.get_state()
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Conversation complete.{RESET}")
        print(f"{DIM}  Messages: {state.message_count}, engagement: {state.engagement_level.value}{RESET}")
        print(f"{DIM}  Products mentioned: {state.mentioned_products}{RESET}")
        print(f"{DIM}  Lead: {self.lead.model_dump(exclude_none=True)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline lead chatbot demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--kb",
        default=None,
        help="Path to a JSON knowledge base (defaults to KNOWLEDGE_BASE_PATH or the demo catalog)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the validation-phrase randomness",
    )
    args = parser.parse_args()

    try:
        knowledge_base = get_knowledge_base(args.kb)
    except KnowledgeBaseLoadError as e:
        print(f"{RED}{e}{RESET}")
        sys.exit(1)

    session = ConsoleSession(knowledge_base, seed=args.seed)
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
