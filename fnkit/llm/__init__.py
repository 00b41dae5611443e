"""Chat-completion types, provider configuration, a client registry, chat helpers and a DeepSeek client."""